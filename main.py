#!/usr/bin/env python3
"""
Main entry point for the CollabVM Emoji Bot
"""

from emojibot.main import run

if __name__ == "__main__":
    run()
