"""
game control for a physical occupancy sensing chess board connected over serial
"""

import logging
import time

import serial

from sensor_chess import config
from sensor_chess.occupancy import Occupancy
from sensor_chess.pending import OutcomeKind

log = logging.getLogger(__name__)


def init_hardware(port=config.SERIAL_PORT, baud_rate=config.BAUD_RATE, timeout=config.SERIAL_TIMEOUT):
    """
    open the serial connection to the sensor controller

    Args:
        port (str): serial device, defaults to SERIAL_PORT
        baud_rate (int): must match the controller firmware
        timeout (float): seconds a readline may block

    Returns:
        serial.Serial: the open connection
    """
    controller = serial.Serial(port, baud_rate, timeout=timeout)
    # give the controller time to boot after the port opens
    time.sleep(2)
    controller.reset_input_buffer()
    log.info("connected to sensor controller on %s at %d baud", port, baud_rate)
    return controller


def shutdown_hardware(controller):
    """
    close everything opened by init_hardware

    Args:
        controller (serial.Serial): connection to the sensor controller

    Returns:
        None
    """
    controller.close()
    log.info("sensor controller disconnected")


def read_snapshot(controller):
    """
    read one occupancy line from the controller

    Args:
        controller (serial.Serial): connection to the sensor controller

    Returns:
        Occupancy | None: the reading, None on timeout or an unreadable line
    """
    raw = controller.readline()
    if not raw:
        return None
    line = raw.decode("utf-8", errors="replace").strip()
    if not line:
        return None
    try:
        return Occupancy.parse(line)
    except ValueError:
        # the controller also prints status text, skip anything that is not a reading
        log.warning("skipping unreadable line from controller: %r", line)
        return None


def wait_for_snapshot(controller, attempts=50):
    """
    read until a valid occupancy line arrives

    Args:
        controller (serial.Serial): connection to the sensor controller
        attempts (int): number of readlines before giving up

    Returns:
        Occupancy

    Raises:
        TimeoutError: if no reading arrives within "attempts" reads
    """
    for _ in range(attempts):
        snapshot = read_snapshot(controller)
        if snapshot is not None:
            return snapshot
    raise TimeoutError("sensor controller sent no reading")


def resync(board_item, controller, confirm=input):
    """
    let the operator fix the board after a halt and trust the next reading

    Args:
        board_item (BoardItem): the board to reset
        controller (serial.Serial): connection to the sensor controller
        confirm (callable): prompt function, input by default

    Returns:
        OccupancyDiff: discrepancy left after the reset
    """
    print("\nInterpretation halted. Re-seat the pieces to match the board shown above.")
    confirm("Press enter once the board is set up: ")
    # drop readings taken while the pieces were being moved
    controller.reset_input_buffer()
    snapshot = wait_for_snapshot(controller)
    discrepancy = board_item.reset(snapshot)
    if discrepancy.is_empty():
        print("Board matches the game, continuing.")
    else:
        print(f"Board still differs from the game: {discrepancy}")
    return discrepancy


def run_board(board_item, controller, show_board=config.SHOW_BOARD, confirm=input, max_readings=None):
    """
    feed readings from the controller into the board until the game ends

    Args:
        board_item (BoardItem): the board being played on
        controller (serial.Serial): connection to the sensor controller
        show_board (bool): print the diagnostic board after every change
        confirm (callable): prompt used when a halt needs the operator
        max_readings (int | None): stop after this many readings, None runs until the game is over

    Returns:
        list[str]: moves committed, in UCI
    """
    readings = 0
    if show_board:
        board_item.display_board()

    while max_readings is None or readings < max_readings:
        snapshot = read_snapshot(controller)
        board_item.check_staleness()

        if snapshot is None:
            if board_item.is_halted:
                resync(board_item, controller, confirm)
            time.sleep(config.POLL_DELAY)
            continue
        readings += 1

        # the controller repeats readings, only report the ones that changed something
        changed = snapshot != board_item.observer.baseline
        outcome = board_item.observe(snapshot)
        if outcome.kind == OutcomeKind.HALTED:
            print(f"[BOARD] {outcome}")
            if show_board:
                board_item.display_board()
            resync(board_item, controller, confirm)
            continue
        if not changed or outcome.kind == OutcomeKind.NOOP:
            continue

        for step in outcome.prior + (outcome,):
            print(f"[BOARD] {step}")
        if show_board:
            board_item.display_board()

        if outcome.kind == OutcomeKind.GAME_OVER or board_item.game_state.is_game_over():
            print("\nGame over")
            print("Result:", board_item.game_state.board.result())
            break

    return list(board_item.move_log)
