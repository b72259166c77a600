"""Decoding of Log4Net UDP datagrams.

Wire layout, ``;``-separated::

    [0] source            [4] log level     [8+] message content
    [1] log row number    [5] host               (may itself contain ``;``)
    [2] ISO timestamp     [6] subsystem
    [3] local timestamp   [7] windows user

Fields 0-6 are mandatory. Everything from field 8 on is the message body and
is rejoined with the delimiter so embedded semicolons survive.
"""

from __future__ import annotations

import logging

from logscanner.models.runtime import DecodedMessage, DecodeFailure, RawDatagram

logger = logging.getLogger("logscanner.decoder")

FIELD_DELIMITER = ";"
MIN_FIELDS = 7
_CONTENT_START = 8
_PATH_SEPARATORS = ("/", "\\")


def _field(parts: list[str], index: int) -> str:
    return parts[index] if index < len(parts) else ""


def normalize_source(raw: str) -> str:
    """Lowercase a source label and strip path separators."""
    source = raw.lower()
    for sep in _PATH_SEPARATORS:
        source = source.replace(sep, "")
    return source


def decode(payload: bytes, sender: tuple[str, int]) -> DecodedMessage | DecodeFailure:
    """Decode one datagram. Never raises; failures come back as DecodeFailure."""
    sender_ip, sender_port = sender[0], sender[1]
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        return DecodeFailure(
            reason=f"payload is not valid UTF-8 text: {exc.reason}",
            raw_message=payload.decode("utf-8", errors="replace"),
            sender_ip=sender_ip,
            sender_port=sender_port,
        )

    try:
        parts = text.split(FIELD_DELIMITER)
        if len(parts) < MIN_FIELDS:
            return DecodeFailure(
                reason=f"expected at least {MIN_FIELDS} fields, got {len(parts)}",
                raw_message=text,
                sender_ip=sender_ip,
                sender_port=sender_port,
            )

        return DecodedMessage(
            source=normalize_source(parts[0]),
            log_row_number=parts[1],
            iso_timestamp=parts[2],
            local_timestamp=parts[3],
            log_level=parts[4],
            host=parts[5],
            subsystem=parts[6],
            windows_user=_field(parts, 7),
            message_content=FIELD_DELIMITER.join(parts[_CONTENT_START:]),
            sender_ip=sender_ip,
            sender_port=sender_port,
            raw_message=text,
        )
    except Exception as exc:  # noqa: BLE001
        logger.debug("Unexpected decode error", exc_info=True)
        return DecodeFailure(
            reason=f"decode error: {exc}",
            raw_message=text,
            sender_ip=sender_ip,
            sender_port=sender_port,
        )


def decode_datagram(raw: RawDatagram) -> DecodedMessage | DecodeFailure:
    """Decode a RawDatagram as produced by the listener."""
    return decode(raw.payload, (raw.sender_host, raw.sender_port))
