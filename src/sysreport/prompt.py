"""
Interactive agreement prompt.

Asks the user whether the collected report may be sent and classifies the
answer. Also provides the token splitter used to read the interactive
output stream, where the question appears without a trailing newline.
"""

from __future__ import annotations

import enum
import logging
from typing import IO, Iterator, NamedTuple

logger = logging.getLogger(__name__)

QUESTION = "Do you agree to report this?"
PROMPT = f"{QUESTION} [y (send metrics)/n (send opt out message)/Q (quit)] "
INVALID_ANSWER = "Sorry, please answer y, n or q."


class Decision(enum.Enum):
    """Outcome of asking the user."""

    AGREE = "agree"
    DECLINE = "decline"
    ABORT = "abort"


ANSWERS: dict[str, Decision] = {
    "y": Decision.AGREE,
    "yes": Decision.AGREE,
    "n": Decision.DECLINE,
    "no": Decision.DECLINE,
    "q": Decision.ABORT,
    "quit": Decision.ABORT,
    "": Decision.ABORT,
}


def classify_answer(answer: str) -> Decision | None:
    """
    Classify a single answer line.

    Only an exact, case-insensitive match on a known token counts; an
    answer that merely contains one (``yesgarbage``) is not recognized.

    Returns:
        The decision, or None if the answer is not recognized.
    """
    return ANSWERS.get(answer.strip().lower())


def ask(stdin: IO[str], stdout: IO[str], prompt: str = PROMPT) -> Decision:
    """
    Ask for agreement until a recognized answer is given.

    End of input and keyboard interrupts count as quitting.

    Args:
        stdin: Stream the answer lines are read from.
        stdout: Stream the question is written to.
        prompt: Question text, written without a trailing newline.

    Returns:
        The user's decision.
    """
    notice = ""
    while True:
        try:
            stdout.write(notice + prompt)
            stdout.flush()
            line = stdin.readline()
        except KeyboardInterrupt:
            logger.debug("Interrupted while waiting for an answer")
            return Decision.ABORT

        if not line:
            logger.debug("Input closed while waiting for an answer")
            return Decision.ABORT

        decision = classify_answer(line)
        if decision is not None:
            logger.debug(f"Answer {line.strip()!r} classified as {decision.value}")
            return decision

        notice = f"{INVALID_ANSWER}\n"


class ScanStatus(enum.Enum):
    TOKEN = "token"
    NEED_MORE = "need_more"
    END = "end"


class ScanResult(NamedTuple):
    advance: int
    token: bytes | None
    status: ScanStatus


def _drop_cr(data: bytes) -> bytes:
    if data.endswith(b"\r"):
        return data[:-1]
    return data


def scan_lines_or_question(
    data: bytes, at_eof: bool, question: bytes = PROMPT.encode()
) -> ScanResult:
    """
    Split interactive output into lines or questions.

    A token ends either at a newline, which is dropped, or right after the
    question text, which has no newline and is kept in the token.

    Args:
        data: Buffered, not yet consumed bytes.
        at_eof: Whether the stream is closed and no more data will come.
        question: Question text acting as the second terminator.

    Returns:
        How many bytes to consume, the token found, and the scan status.
    """
    if at_eof and not data:
        return ScanResult(0, None, ScanStatus.END)

    newline = data.find(b"\n")
    asked = data.find(question)
    if asked >= 0 and (newline < 0 or asked < newline):
        end = asked + len(question)
        return ScanResult(end, data[:end], ScanStatus.TOKEN)
    if newline >= 0:
        return ScanResult(newline + 1, _drop_cr(data[:newline]), ScanStatus.TOKEN)

    if at_eof:
        return ScanResult(len(data), _drop_cr(data), ScanStatus.TOKEN)
    return ScanResult(0, None, ScanStatus.NEED_MORE)


def iter_tokens(stream: IO, chunk_size: int = 4096) -> Iterator[str]:
    """Yield lines and questions from a binary or text stream as they arrive."""
    reader = getattr(stream, "buffer", stream)
    read = getattr(reader, "read1", reader.read)

    buffer = b""
    at_eof = False
    while True:
        advance, token, status = scan_lines_or_question(buffer, at_eof)
        if status is ScanStatus.END:
            return
        if status is ScanStatus.TOKEN:
            buffer = buffer[advance:]
            yield (token or b"").decode("utf-8", errors="replace")
            continue

        chunk = read(chunk_size)
        if isinstance(chunk, str):
            chunk = chunk.encode()
        if chunk:
            buffer += chunk
        else:
            at_eof = True
