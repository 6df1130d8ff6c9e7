"""
Vanguard CLI - Command-line interface for the engine.

Usage:
    vanguard selfplay               Play a full game between two bots
    vanguard advise                 Rank the options in a position
    vanguard validate <deck_file>   Validate a deck list
    vanguard serve                  Run the HTTP API
"""

from dataclasses import replace
import argparse
import json
import logging
import random
import sys

from .config import Settings, configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Vanguard - Card game engine and MCTS advisor",
        prog="vanguard",
    )
    parser.add_argument("--log-level", help="Logging level (default from VANGUARD_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Selfplay command
    selfplay_parser = subparsers.add_parser("selfplay", help="Play a full game between two bots")
    selfplay_parser.add_argument("--seed", type=int, default=None, help="Match seed")
    selfplay_parser.add_argument("--p1", default="random", help="Policy for player 1: random, first_legal, advisor")
    selfplay_parser.add_argument("--p2", default="random", help="Policy for player 2")
    selfplay_parser.add_argument("--deck-a", help="Deck file for player 1 (demo deck if omitted)")
    selfplay_parser.add_argument("--deck-b", help="Deck file for player 2 (demo deck if omitted)")
    selfplay_parser.add_argument("--max-steps", type=int, default=5000, help="Safety limit on actions")
    _add_search_arguments(selfplay_parser)
    selfplay_parser.add_argument("--log", action="store_true", help="Print every action")

    # Advise command
    advise_parser = subparsers.add_parser("advise", help="Rank the options in a position")
    advise_parser.add_argument("--seed", type=int, default=None, help="Match seed")
    advise_parser.add_argument(
        "--steps", type=int, default=0,
        help="Random actions to play before advising",
    )
    advise_parser.add_argument("--top", type=int, default=5, help="How many actions to show")
    _add_search_arguments(advise_parser)

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a deck list")
    validate_parser.add_argument("deck_file", help="Path to a .json deck list")
    validate_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "selfplay":
        return cmd_selfplay(args)
    elif args.command == "advise":
        return cmd_advise(args)
    elif args.command == "validate":
        return cmd_validate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _add_search_arguments(parser):
    parser.add_argument("--iterations", type=int, help="Search iteration cap")
    parser.add_argument("--time-limit", type=float, help="Search time limit in seconds")


def _search_config(args):
    config = Settings.from_env().search
    if args.iterations is not None:
        config = replace(config, max_iterations=args.iterations)
    if args.time_limit is not None:
        config = replace(config, time_limit=args.time_limit)
    if getattr(args, "seed", None) is not None:
        config = replace(config, seed=args.seed)
    return config


def _load_deck_or_exit(path, database):
    from .card_schema import load_deck, DeckValidationError

    try:
        deck, database, result = load_deck(path, database, strict=True)
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)
    except (ValueError, KeyError) as e:
        print(f"Error: Could not read deck {path}: {e}")
        sys.exit(1)
    except DeckValidationError as e:
        print(f"Error: {path} is not a legal deck")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)
    for warning in result.warnings:
        print(f"Warning ({path}): {warning}")
    return deck, database


def cmd_selfplay(args):
    """Play a full game between two bots and print a summary."""
    from .games.standard import standard_database
    from .session import SessionManager, GameLoop, LoopState, make_bot

    database = standard_database()
    deck_a = deck_b = None
    if args.deck_a:
        deck_a, database = _load_deck_or_exit(args.deck_a, database)
    if args.deck_b:
        deck_b, database = _load_deck_or_exit(args.deck_b, database)

    config = _search_config(args)
    manager = SessionManager(config)
    try:
        session = manager.create_session(
            seed=args.seed,
            human_player_index=None,
            bot_kind=args.p1,
            deck_a=deck_a,
            deck_b=deck_b,
            database=database,
        )
        bot_seed = None if args.seed is None else args.seed + 2
        session.bots[1] = make_bot(args.p2, bot_seed, config)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    loop = GameLoop(session, max_steps=args.max_steps)
    result = loop.run_bots()

    if args.log:
        for entry in session.action_log:
            print(entry)
        print()

    state = session.game_state
    print(f"Players: {session.bots[0].get_name()} vs {session.bots[1].get_name()}")
    print(f"Actions: {len(session.action_log)}")
    print(f"Turns: {state.turn}")
    for index, player in enumerate(state.players):
        vanguard = player.board.vanguard
        print(
            f"Player {index + 1}: damage {len(player.damage)}, "
            f"vanguard {vanguard.name if vanguard else '-'} (grade {vanguard.grade if vanguard else '-'}), "
            f"deck {len(player.deck)}"
        )

    if result.loop_state == LoopState.GAME_OVER:
        print(f"Winner: Player {result.winner + 1}")
        return 0
    print("No winner: " + "; ".join(result.warnings + result.errors))
    return 1


def cmd_advise(args):
    """Run the advisor on a freshly set up (optionally advanced) position."""
    from .games.standard import setup_match
    from .engine_core import ActionGenerator, Reducer
    from .bots import AdvisorBot

    state = setup_match(args.seed)
    generator = ActionGenerator()
    reducer = Reducer(resolver=generator.resolver)
    rng = random.Random(args.seed)

    for _ in range(args.steps):
        if state.is_game_over():
            break
        state = reducer.apply(state, rng.choice(generator.generate(state))).new_state

    if state.is_game_over():
        print("The game ended before the position was reached")
        return 1

    actions = generator.generate(state)
    print(f"Turn {state.turn}, phase {state.phase.value}, player {state.acting_player_index + 1} to act")
    print(f"{len(actions)} legal action(s)")

    advisor = AdvisorBot(_search_config(args))
    decision = advisor.select_action(state, actions)

    print(f"\nRecommended: {decision.action.description}")
    print(f"  {decision.explanation}")
    if decision.alternatives:
        print("\nRanking:")
        for rank, evaluated in enumerate(decision.alternatives[: args.top], start=1):
            print(
                f"  {rank}. {evaluated.action.description:<50} "
                f"score {evaluated.score:.3f}  visits {evaluated.visits}"
            )
    return 0


def cmd_validate(args):
    """Validate a deck list against the demo card pool."""
    from .games.standard import standard_database
    from .card_schema import load_deck

    try:
        deck, _, result = load_deck(args.deck_file, standard_database())
    except FileNotFoundError:
        print(f"Error: File not found: {args.deck_file}")
        sys.exit(1)
    except (ValueError, KeyError) as e:
        print(f"Error: Could not read deck: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps({
            "deck": deck.name,
            "valid": result.valid,
            "errors": result.errors,
            "warnings": result.warnings,
        }, indent=2))
    else:
        print(f"Deck: {deck.name}")
        print(f"Main deck: {deck.main_deck_size} cards, ride deck: {len(deck.ride_deck)} entries")
        print(f"Valid: {'yes' if result.valid else 'no'}")
        if result.warnings:
            print("\nWarnings:")
            for w in result.warnings:
                print(f"  - {w}")
        if result.errors:
            print("\nErrors:")
            for e in result.errors:
                print(f"  - {e}")

    if not result.valid:
        sys.exit(1)
    return 0


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    logger.info(f"Serving on {args.host}:{args.port}")
    uvicorn.run("vanguard.api.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
