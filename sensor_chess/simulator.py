"""
software testing for the occupancy board without the sensor grid
"""

import chess

from sensor_chess.errors import InvalidPosition
from sensor_chess.pending import OutcomeKind

HELP = (
    "Commands:\n"
    "  take <square> | t <square>   lift the piece on a square (e.g. take e2)\n"
    "  put <square>  | p <square>   put a piece down on a square (e.g. put e4)\n"
    "  promote <q|r|b|n>            choose the promotion piece\n"
    "  reset                        trust the simulated board as it is now\n"
    "  new [fen]                    start a new game and set the board up for it\n"
    "  show                         print the board\n"
    "  quit                         leave the simulator"
)


def parse_square(text):
    """
    convert algebraic notation like "b5" to a square index

    Args:
        text (str): square name

    Returns:
        int | None: python-chess square, None if the text is not a square
    """
    text = text.strip().lower()
    if len(text) != 2 or text[0] not in "abcdefgh" or text[1] not in "12345678":
        return None
    return chess.parse_square(text)


def run_simulator(board_item, ask=input):
    """
    drive a board from typed commands instead of sensor readings

    every take/put flips one square of a simulated physical board and hands the
    new reading to the board, exactly like one sensor scan

    Args:
        board_item (BoardItem): the board to drive
        ask (callable): prompt function, input by default

    Returns:
        Occupancy: the simulated physical board when the simulator exits
    """
    physical = board_item.observer.baseline
    print("Chess board simulator")
    print(HELP)
    board_item.display_board()

    while True:
        try:
            raw = ask("> ").strip()
        except EOFError:
            break
        if not raw:
            continue
        line = raw.lower()
        parts = line.split()
        command = parts[0]

        if command in ("quit", "exit"):
            break

        if command in ("take", "t", "put", "p"):
            if len(parts) != 2:
                print("Invalid command format. Use 'take b5' or 'put b5'")
                continue
            square = parse_square(parts[1])
            if square is None:
                print("Invalid square notation. Use a1-h8")
                continue
            # take clears the bit, put sets it
            physical = physical.with_square(square, command in ("put", "p"))
            outcome = board_item.observe(physical)
            for step in outcome.prior + (outcome,):
                print(f"[BOARD] {step}")
            if outcome.kind == OutcomeKind.AWAITING_PROMOTION:
                print("Promotion: choose a piece with 'promote q|r|b|n'")
            board_item.display_board()

        elif command == "promote":
            if len(parts) != 2:
                print("Use 'promote q', 'promote r', 'promote b' or 'promote n'")
                continue
            try:
                outcome = board_item.supply_promotion_choice(parts[1])
            except ValueError as exc:
                print(exc)
                continue
            print(f"[BOARD] {outcome}")
            board_item.display_board()

        elif command == "reset":
            discrepancy = board_item.reset(physical)
            print(f"Reset. Differences from the game: {discrepancy}")
            board_item.display_board()

        elif command == "new":
            fen = raw[len("new"):].strip() or chess.STARTING_FEN
            try:
                board_item.start_new_game(fen)
            except InvalidPosition as exc:
                print(exc)
                continue
            # the simulated pieces get set up for the new game
            physical = board_item.expected_occupancy()
            board_item.display_board()

        elif command == "show":
            board_item.display_board()

        else:
            print("Unknown command.")
            print(HELP)

    return physical
