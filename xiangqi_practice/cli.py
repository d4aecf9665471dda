"""
象棋练习 CLI

## 使用示例

```bash
# 某个局面下的合法走法（棋谱用逗号分隔，记谱格式 "fxfy-txty"）
xiangqi-practice moves --history "09-07,00-01"

# 引擎给出的走法评分
xiangqi-practice best --history "09-07" --rating 1200 --n 5

# 第 i 手前后的局面
xiangqi-practice replay --history "09-07,00-01" --index 1

# 等级分对应的段位
xiangqi-practice rank 1350

# 在终端里和引擎下一盘
xiangqi-practice play
```
"""

from __future__ import annotations

import json
import random
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from xiangqi_practice.ai import MinimaxAI, config_for_rating
from xiangqi_practice.board import Board
from xiangqi_practice.config import PracticeConfig
from xiangqi_practice.controller import ControllerState, GameController
from xiangqi_practice.game import GameSession
from xiangqi_practice.logging import configure_file_logging
from xiangqi_practice.rating import apply_result, rank_title
from xiangqi_practice.rating_store import JsonRatingStore
from xiangqi_practice.replay import reconstruct
from xiangqi_practice.types import Color, GameResult, Move

app = typer.Typer(help="Xiangqi practice engine - 人机对弈、复盘与等级分")
console = Console()


def parse_history(history: str) -> GameSession:
    """按记谱依次走棋，遇到不合法的走法报错"""
    session = GameSession()
    for i, notation in enumerate(n for n in history.replace(" ", ",").split(",") if n):
        move = Move.from_notation(notation)
        if session.make_move(move.from_pos, move.to_pos) is None:
            raise ValueError(f"Illegal move #{i} ({notation}) for {session.turn.value}")
    return session


def render_board(board: Board) -> str:
    return board.display()


@app.command()
def moves(
    history: str = typer.Option("", "--history", "-H", help="棋谱，例如 09-07,00-01"),
    output_json: bool = typer.Option(False, "--json", help="JSON 输出"),
) -> None:
    """获取合法走法"""
    try:
        session = parse_history(history)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    legal = [
        Move(pos, to_pos).to_notation()
        for pos, _ in session.board.pieces(session.turn)
        for to_pos in session.legal_destinations(pos)
    ]
    if output_json:
        print(json.dumps({"turn": session.turn.value, "moves": legal, "total": len(legal)}))
        return

    console.print(f"Legal moves for {session.turn.value} ({len(legal)}):")
    for notation in legal:
        console.print(f"  {notation}")


@app.command()
def best(
    history: str = typer.Option("", "--history", "-H", help="棋谱，例如 09-07"),
    rating: int = typer.Option(1200, "--rating", "-r", help="玩家等级分（决定搜索深度）"),
    depth: int | None = typer.Option(None, "--depth", "-d", help="覆盖搜索深度"),
    n: int = typer.Option(5, "--n", "-n", help="显示的走法数量"),
    output_json: bool = typer.Option(False, "--json", help="JSON 输出"),
) -> None:
    """引擎为当前局面的走法打分"""
    try:
        session = parse_history(history)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    config = config_for_rating(rating)
    if depth is not None:
        config.depth = depth
    ai = MinimaxAI(config)
    scored = ai.score_moves(session.board, session.turn)[:n]

    if output_json:
        response = {
            "turn": session.turn.value,
            "depth": config.depth,
            "moves": [{"move": m.to_notation(), "score": score} for m, score in scored],
        }
        print(json.dumps(response))
        return

    table = Table(title=f"Best moves for {session.turn.value} (depth={config.depth})")
    table.add_column("#", justify="right")
    table.add_column("Move")
    table.add_column("Score", justify="right")
    for i, (move, score) in enumerate(scored, 1):
        table.add_row(str(i), move.to_notation(), f"{score:.0f}")
    console.print(table)


@app.command()
def replay(
    history: str = typer.Option(..., "--history", "-H", help="棋谱"),
    index: int | None = typer.Option(
        None, "--index", "-i", help="第几手（从 0 开始），默认最后一手"
    ),
) -> None:
    """显示某一手走之前和走之后的局面"""
    try:
        session = parse_history(history)
        frame = reconstruct(session.history, index)
    except (ValueError, IndexError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    console.print(f"Move {frame.index}: {frame.move.description} ({frame.move.move.to_notation()})")
    console.print("Before:")
    console.print(render_board(frame.before))
    console.print("After:")
    console.print(render_board(frame.after))


@app.command()
def rank(rating: int = typer.Argument(..., help="等级分")) -> None:
    """段位称号及赢/输一局的等级分变化"""
    win_rating, win_change = apply_result(rating, GameResult.WIN)
    loss_rating, loss_change = apply_result(rating, GameResult.LOSS)
    console.print(f"{rating}: {rank_title(rating)}")
    console.print(f"  win:  {win_change:+d} -> {win_rating} ({rank_title(win_rating)})")
    console.print(f"  loss: {loss_change:+d} -> {loss_rating} ({rank_title(loss_rating)})")


@app.command()
def play(
    rating_file: Path | None = typer.Option(None, "--rating-file", help="等级分存档"),
    seed: int | None = typer.Option(None, "--seed", help="引擎随机种子"),
) -> None:
    """在终端里与引擎对弈（输入 09-07 走棋，resign 认输，restart 重来，quit 退出）"""
    config = PracticeConfig.from_env()
    configure_file_logging(config.log_dir)
    store = JsonRatingStore(rating_file or config.rating_file, default=config.default_rating)
    controller = GameController(
        rating_store=store,
        config=config,
        rng=random.Random(seed if seed is not None else config.seed),
    )
    console.print(f"Rating {controller.rating} ({rank_title(controller.rating)})")

    while True:
        if controller.state == ControllerState.AI_THINKING:
            with console.status("AI 思考中..."):
                record = controller.run_ai_turn()
            if record is not None:
                console.print(f"[bold]AI:[/bold] {record.description}")
            continue

        console.print(render_board(controller.board))
        if controller.state == ControllerState.GAME_OVER:
            summary = controller.summary
            if summary is not None:
                console.print(
                    f"Game over: {summary.result.value} ({summary.record.reason.value}), "
                    f"rating {summary.rating_before} -> {summary.rating_after} "
                    f"({summary.rating_change:+d}, {summary.rank_title})"
                )
            break

        if controller.session.is_in_check():
            console.print("[red]将军！[/red]")
        command = typer.prompt(f"{Color.RED.label}方走棋").strip().lower()
        if command in ("quit", "exit"):
            break
        if command in ("resign", "restart"):
            request = (
                controller.request_resign if command == "resign" else controller.request_restart
            )
            if not request():
                console.print(
                    f"Type '{command}' again within "
                    f"{config.confirm_window_seconds:g} seconds to confirm."
                )
            continue

        try:
            move = Move.from_notation(command)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            continue
        if controller.play_move(move.from_pos, move.to_pos) is None:
            console.print("[yellow]Illegal move[/yellow]")


if __name__ == "__main__":
    app()
