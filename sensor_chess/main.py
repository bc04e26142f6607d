"""
entry point for the occupancy sensing chess board

Usage:
    sensor-chess run --port /dev/ttyACM0
    sensor-chess simulate --fen "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
"""

import argparse
import logging
import sys

from sensor_chess import config
from sensor_chess.board_item import BoardItem
from sensor_chess.reconciler import PromotionPolicy, parse_promotion_piece

log = logging.getLogger("sensor_chess")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="sensor-chess",
        description="Turn occupancy readings from a physical chess board into moves.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log pending actions too")
    parser.add_argument("--fen", default=config.START_FEN, help="starting position")
    parser.add_argument("--promotion", default=config.DEFAULT_PROMOTION,
                        help="default promotion piece (q, r, b, n) or 'none' to always wait")
    parser.add_argument("--wait-promotion", action="store_true", default=config.WAIT_FOR_PROMOTION_CHOICE,
                        help="wait for a promotion choice instead of using the default")
    parser.add_argument("--pending-timeout", type=float, default=config.PENDING_TIMEOUT,
                        help="seconds before a half finished move is abandoned")
    parser.add_argument("--quiet", action="store_true", help="do not print the board after every change")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="read the sensor controller over serial")
    run.add_argument("--port", default=config.SERIAL_PORT, help="serial device")
    run.add_argument("--baud", type=int, default=config.BAUD_RATE, help="baud rate")

    sub.add_parser("simulate", help="type take/put commands instead of using the board")
    return parser


def make_board(args):
    """
    build a BoardItem from parsed arguments

    Args:
        args (argparse.Namespace): parsed command line

    Returns:
        BoardItem: the board, set up for the requested position
    """
    piece = None
    if args.promotion and args.promotion.lower() != "none":
        piece = parse_promotion_piece(args.promotion)
    policy = PromotionPolicy(default_piece=piece, wait_for_choice=args.wait_promotion)
    return BoardItem(fen=args.fen, promotion_policy=policy, pending_timeout=args.pending_timeout)


def cmd_run(args, board_item):
    from sensor_chess.game_loop import init_hardware, run_board, shutdown_hardware

    controller = init_hardware(args.port, args.baud)
    try:
        moves = run_board(board_item, controller, show_board=not args.quiet)
    finally:
        shutdown_hardware(controller)
    log.info("game finished after %d moves: %s", len(moves), " ".join(moves))


def cmd_simulate(args, board_item):
    from sensor_chess.simulator import run_simulator

    run_simulator(board_item)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=config.LOG_FORMAT,
    )

    try:
        board_item = make_board(args)
    except ValueError as exc:
        log.error("%s", exc)
        return 2

    try:
        if args.command == "run":
            cmd_run(args, board_item)
        else:
            cmd_simulate(args, board_item)
    except KeyboardInterrupt:
        print("\nstopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
