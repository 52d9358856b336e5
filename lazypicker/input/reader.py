"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Printable keys come back as themselves; named keys as upper-case tokens
(``UP``, ``ENTER``, ``PAGE_DOWN`` ...). Escape sequences that map to no
token are consumed whole and come back as ``UNKNOWN``.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
CSI_MAX_PARAM_BYTES = 16
UNKNOWN_KEY = "UNKNOWN"
_PENDING_BYTES: list[bytes] = []

_CONTROL_TOKENS = {
    b"\x03": "CTRL_C",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\x15": "CTRL_U",
    b"\r": "ENTER",
    b"\n": "ENTER",
}
_CSI_FINAL_TOKENS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "SHIFT_TAB",
}
_CSI_TILDE_TOKENS = {
    b"1": "HOME",
    b"3": "DELETE",
    b"4": "END",
    b"7": "HOME",
    b"8": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, lead: bytes) -> str:
    first = lead[0]
    if first >= 0xF0:
        remaining = 3
    elif first >= 0xE0:
        remaining = 2
    elif first >= 0xC0:
        remaining = 1
    else:
        remaining = 0
    data = lead
    for _ in range(remaining):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data += part
    return data.decode("utf-8", errors="replace")


def _read_csi_tail(fd: int) -> tuple[bytes, bytes | None]:
    """Consume CSI parameter bytes up to the final byte.

    Returns ``(params, final)``; ``final`` is ``None`` when the sequence is
    cut short by a timeout or a byte outside the CSI ranges.
    """
    params = b""
    while len(params) < CSI_MAX_PARAM_BYTES:
        ch = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if ch is None:
            return params, None
        code = ch[0]
        if 0x40 <= code <= 0x7E:
            return params, ch
        if not 0x20 <= code <= 0x3F:
            _PENDING_BYTES.append(ch)
            return params, None
        params += ch
    return params, None


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token, or ``""`` when ``timeout_ms`` elapses first."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    token = _CONTROL_TOKENS.get(ch)
    if token is not None:
        return token

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch)

    # Escape / CSI / SS3 sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _CSI_FINAL_TOKENS.get(final, UNKNOWN_KEY)
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"

    params, final = _read_csi_tail(fd)
    if final is None:
        return UNKNOWN_KEY if params else "ESC"
    if final == b"~":
        return _CSI_TILDE_TOKENS.get(params, UNKNOWN_KEY)
    if params:
        # Modified keys such as Ctrl-Right (ESC [ 1 ; 5 C).
        return UNKNOWN_KEY
    return _CSI_FINAL_TOKENS.get(final, UNKNOWN_KEY)
