from emojibot.session.state import Phase, SessionState, find_transition


class TestSessionState:
    def setup_method(self):
        self.state = SessionState(display_name="EmojiBot")

    def test_starts_connecting_without_privilege(self):
        assert self.state.phase is Phase.CONNECTING
        assert not self.state.is_elevated

    def test_advance_moves_forward(self):
        assert self.state.advance(Phase.CONNECTED)
        assert self.state.phase is Phase.CONNECTED

    def test_advance_never_moves_backwards(self):
        self.state.advance(Phase.AUTHENTICATED)
        assert not self.state.advance(Phase.CONNECTED)
        assert self.state.phase is Phase.AUTHENTICATED

    def test_same_rank_phases_do_not_replace_each_other(self):
        self.state.advance(Phase.AWAITING_AUTH)
        assert not self.state.advance(Phase.RENAME_CONFIRMED)
        assert self.state.phase is Phase.AWAITING_AUTH

    def test_closed_is_terminal(self):
        self.state.advance(Phase.CLOSED)
        assert not self.state.advance(Phase.AUTHENTICATED)
        assert self.state.phase is Phase.CLOSED


class TestTransitions:
    def test_rename_self_and_other_route_differently(self):
        assert find_transition(["rename", "0", "0", "Bot"]).handler == "on_rename_self"
        assert find_transition(["rename", "1", "old", "new"]).handler == "on_ignored"

    def test_admin_sub_opcodes(self):
        assert find_transition(["admin", "0", "1"]).handler == "on_admin_login"
        assert find_transition(["admin", "2", "ok"]).handler == "on_monitor_reply"
        assert find_transition(["admin", "19"]) is None

    def test_unknown_and_empty_frames_have_no_transition(self):
        assert find_transition([]) is None
        assert find_transition(["turn", "1"]) is None
