"""
人机对弈控制器单元测试
"""

import random
from concurrent.futures import Executor, Future, ThreadPoolExecutor

import pytest

import xiangqi_practice.game as game_module
from xiangqi_practice.board import Board
from xiangqi_practice.commentary import (
    COMMENTARY_PLACEHOLDER,
    OPENING_COMMENT,
    YOUR_TURN_COMMENT,
    CoachFeedback,
    CommentaryClient,
)
from xiangqi_practice.controller import (
    ClickOutcome,
    ControllerState,
    GameController,
    PendingConfirmation,
)
from xiangqi_practice.rating_store import InMemoryRatingStore
from xiangqi_practice.types import Color, GameResult, Position


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class ImmediateExecutor(Executor):
    """在调用线程里直接执行"""

    def submit(self, fn, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class FakeService:
    def __init__(self, comment="好棋！"):
        self.comment = comment
        self.calls: list[tuple] = []

    def move_commentary(self, snapshot, last_move):
        self.calls.append((snapshot, last_move))
        if isinstance(self.comment, Exception):
            raise self.comment
        return self.comment

    def game_review(self, mode, moves):
        return '```json\n{"criticalMoveIndex": 1, "analysis": "第二手是败着"}\n```'


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    # 900 分：搜索深度 2，测试里引擎回合很快
    return InMemoryRatingStore(900)


@pytest.fixture
def controller(store, clock):
    return GameController(rating_store=store, clock=clock, rng=random.Random(0))


def resign(controller: GameController) -> None:
    assert not controller.request_resign()
    assert controller.request_resign()


class TestSetup:
    """开局测试"""

    def test_initial_state(self, controller):
        assert controller.state == ControllerState.AWAITING_PLAYER_MOVE
        assert controller.version == 1
        assert controller.rating == 900
        assert controller.board == Board.initial()
        assert controller.comment == OPENING_COMMENT
        assert controller.summary is None

    def test_engine_follows_rating(self, controller):
        """测试引擎难度由等级分决定"""
        assert controller.ai.config.depth == 2
        assert controller.ai.config.randomness == 0.3

    def test_rating_reloaded_on_new_game(self, controller, store):
        store.rating = 1500
        controller.new_game()
        assert controller.rating == 1500
        assert controller.ai.config.depth == 3
        assert controller.ai.config.randomness == 0.0
        assert controller.version == 2


class TestClick:
    """点击选子/走子测试"""

    def test_select_and_move(self, controller):
        assert controller.click(Position(0, 9)) == ClickOutcome.SELECTED
        assert controller.state == ControllerState.PIECE_SELECTED
        assert set(controller.legal_targets) == {Position(0, 8), Position(0, 7)}

        assert controller.click(Position(0, 7)) == ClickOutcome.MOVED
        assert controller.state == ControllerState.AI_THINKING
        assert controller.selected is None
        assert len(controller.session.history) == 1

    def test_clicks_ignored_while_ai_thinking(self, controller):
        controller.play_move(Position(0, 9), Position(0, 7))
        assert controller.click(Position(1, 9)) == ClickOutcome.IGNORED
        assert controller.play_move(Position(1, 9), Position(2, 7)) is None

    def test_deselect_on_empty_square(self, controller):
        controller.click(Position(0, 9))
        assert controller.click(Position(4, 4)) == ClickOutcome.DESELECTED
        assert controller.selected is None
        assert controller.state == ControllerState.AWAITING_PLAYER_MOVE
        assert controller.legal_targets == []

    def test_illegal_target_keeps_selection(self, controller):
        """测试点不合法的敌方棋子时保留选择"""
        controller.click(Position(0, 9))
        assert controller.click(Position(0, 0)) == ClickOutcome.REJECTED
        assert controller.selected == Position(0, 9)
        assert controller.state == ControllerState.PIECE_SELECTED

    def test_switch_selection(self, controller):
        controller.click(Position(0, 9))
        assert controller.click(Position(1, 9)) == ClickOutcome.SELECTED
        assert controller.selected == Position(1, 9)

    def test_click_without_selection(self, controller):
        assert controller.click(Position(4, 4)) == ClickOutcome.IGNORED
        assert controller.click(Position(0, 0)) == ClickOutcome.IGNORED

    def test_illegal_play_move(self, controller):
        assert controller.play_move(Position(0, 9), Position(0, 5)) is None
        assert controller.state == ControllerState.AWAITING_PLAYER_MOVE


class TestAiTurn:
    """引擎回合测试"""

    def test_run_ai_turn(self, controller):
        controller.play_move(Position(7, 7), Position(4, 7))
        record = controller.run_ai_turn()
        assert record is not None
        assert record.color == Color.BLACK
        assert controller.state == ControllerState.AWAITING_PLAYER_MOVE
        assert controller.session.turn == Color.RED
        assert controller.latest_comment() == YOUR_TURN_COMMENT

    def test_no_ai_turn_when_player_to_move(self, controller):
        assert controller.start_ai_turn() is None
        assert controller.run_ai_turn() is None

    def test_submit_to_executor(self, controller):
        controller.play_move(Position(0, 9), Position(0, 8))
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = controller.submit_ai_turn(executor)
            assert future is not None
            reply = future.result(timeout=30)
        assert controller.apply_ai_reply(reply)
        assert len(controller.session.history) == 2

    def test_stale_reply_after_restart(self, controller):
        """测试重来之后旧的引擎结果被丢弃"""
        controller.play_move(Position(0, 9), Position(0, 7))
        ticket = controller.start_ai_turn()
        reply = controller.compute_ai_reply(ticket)

        assert not controller.request_restart()
        assert controller.request_restart()
        assert controller.version == 2

        assert not controller.apply_ai_reply(reply)
        assert controller.session.history == ()
        assert controller.state == ControllerState.AWAITING_PLAYER_MOVE

    def test_stale_reply_after_resign(self, controller):
        """测试认输之后旧的引擎结果被丢弃"""
        controller.play_move(Position(0, 9), Position(0, 7))
        reply = controller.compute_ai_reply(controller.start_ai_turn())
        resign(controller)
        assert not controller.apply_ai_reply(reply)
        assert len(controller.summary.history) == 1


class TestConfirmation:
    """二次确认测试"""

    def test_confirm_within_window(self, controller, clock):
        assert not controller.request_restart()
        assert controller.pending_confirmation == PendingConfirmation.RESTART
        clock.now = 2.5
        assert controller.request_restart()
        assert controller.pending_confirmation == PendingConfirmation.NONE
        assert controller.version == 2

    def test_window_expires(self, controller, clock):
        """测试超过 3 秒后确认状态自动取消"""
        assert not controller.request_restart()
        clock.now = 3.0
        assert controller.pending_confirmation == PendingConfirmation.NONE
        assert not controller.request_restart()
        assert controller.pending_confirmation == PendingConfirmation.RESTART
        clock.now = 4.0
        assert controller.request_restart()

    def test_different_action_rearms(self, controller):
        assert not controller.request_restart()
        assert not controller.request_resign()
        assert controller.pending_confirmation == PendingConfirmation.RESIGN
        assert controller.request_resign()
        assert controller.state == ControllerState.GAME_OVER


class TestGameOver:
    """终局与等级分测试"""

    def test_resign_updates_rating(self, controller, store):
        """测试认输：900 分输给 950 分的引擎扣 17 分"""
        resign(controller)
        summary = controller.summary
        assert controller.state == ControllerState.GAME_OVER
        assert summary.result == GameResult.LOSS
        assert summary.rating_before == 900
        assert summary.rating_after == 883
        assert summary.rating_change == -17
        assert summary.rank_title == "初学乍练"
        assert store.saves == [883]
        assert controller.rating == 883

    def test_no_actions_after_game_over(self, controller):
        resign(controller)
        assert not controller.request_restart()
        assert not controller.request_resign()
        assert controller.click(Position(0, 9)) == ClickOutcome.IGNORED

    def test_win_when_engine_has_no_moves(self, controller, store, monkeypatch):
        """测试引擎无子可走时玩家获胜"""
        monkeypatch.setattr(game_module, "has_legal_move", lambda board, color: False)
        controller.play_move(Position(0, 9), Position(0, 7))
        assert controller.state == ControllerState.GAME_OVER
        assert controller.summary.result == GameResult.WIN
        assert controller.summary.rating_change == 23
        assert store.saves == [923]

    def test_new_game_after_game_over(self, controller):
        resign(controller)
        controller.new_game()
        assert controller.state == ControllerState.AWAITING_PLAYER_MOVE
        assert controller.rating == 883
        assert controller.summary is None
        assert controller.session.history == ()


class TestPracticeFromMistake:
    """从失误处重练测试"""

    def _finished_game(self, controller: GameController) -> None:
        controller.play_move(Position(7, 7), Position(4, 7))
        controller.run_ai_turn()
        resign(controller)

    def test_practice_before_engine_move(self, controller):
        """测试从引擎那一手之前开始，轮到引擎走"""
        self._finished_game(controller)
        history = controller.summary.history
        assert len(history) == 2

        before = controller.version
        session = controller.practice_from_mistake(1)
        assert session.history == history[:1]
        assert controller.state == ControllerState.AI_THINKING
        # 认输和重练各使版本号加一
        assert before == 2
        assert controller.version == before + 1

    def test_practice_from_start(self, controller):
        self._finished_game(controller)
        session = controller.practice_from_mistake(0)
        assert session.history == ()
        assert controller.state == ControllerState.AWAITING_PLAYER_MOVE

    def test_out_of_range(self, controller):
        self._finished_game(controller)
        with pytest.raises(IndexError):
            controller.practice_from_mistake(5)

    def test_requires_finished_game(self, controller):
        with pytest.raises(ValueError):
            controller.practice_from_mistake(0)


class TestCommentary:
    """点评与复盘测试"""

    def test_comment_after_player_move(self, store, clock):
        service = FakeService()
        commentary = CommentaryClient(service, executor=ImmediateExecutor())
        controller = GameController(rating_store=store, clock=clock, commentary=commentary)

        record = controller.play_move(Position(0, 9), Position(0, 7))
        assert controller.latest_comment() == "好棋！"
        assert service.calls == [(controller.board.to_fen(), record.description)]

        controller.run_ai_turn()
        assert controller.latest_comment() == YOUR_TURN_COMMENT

    def test_comment_failure_placeholder(self, store, clock):
        """测试点评失败时显示占位文案，不影响走棋"""
        commentary = CommentaryClient(
            FakeService(comment=ConnectionError("offline")), executor=ImmediateExecutor()
        )
        controller = GameController(rating_store=store, clock=clock, commentary=commentary)
        controller.play_move(Position(0, 9), Position(0, 7))
        assert controller.latest_comment() == COMMENTARY_PLACEHOLDER
        assert controller.state == ControllerState.AI_THINKING

    def test_review_last_game(self, store, clock):
        commentary = CommentaryClient(FakeService(), executor=ImmediateExecutor())
        controller = GameController(rating_store=store, clock=clock, commentary=commentary)
        resign(controller)
        feedback = controller.review_last_game()
        assert feedback.critical_move_index == 1
        assert feedback.analysis == "第二手是败着"

    def test_review_without_service(self, controller):
        resign(controller)
        assert controller.review_last_game() == CoachFeedback()

    def test_review_requires_finished_game(self, controller):
        with pytest.raises(ValueError):
            controller.review_last_game()


class TestReplay:
    def test_replay_frame(self, controller):
        controller.play_move(Position(0, 9), Position(0, 7))
        frame = controller.replay_frame(0)
        assert frame.before == Board.initial()
        assert frame.after == controller.board

    def test_replay_out_of_range(self, controller):
        with pytest.raises(IndexError):
            controller.replay_frame()
