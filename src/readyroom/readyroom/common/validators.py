from __future__ import annotations


def board_number_key(board_number: str) -> tuple[int, str]:
    """Sort key: numeric board number first, raw text as tie-breaker.

    Non-numeric board numbers sort after every numeric one.
    """
    text = str(board_number).strip()
    try:
        return int(text), text
    except ValueError:
        return 10**9, text
