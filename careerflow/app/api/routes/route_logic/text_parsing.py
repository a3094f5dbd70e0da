"""Best-effort parsing of model-written text for display.

None of these functions raise on unexpected input: text that does not follow
the expected convention degrades to a single unsegmented block.
"""

import logging
import re
from typing import Any

log = logging.getLogger(__name__)

BOLD_HEADER_PATTERN = re.compile(r"^[ \t]*\*\*(?P<title>[^*\n]+?)\*\*[ \t]*$", re.MULTILINE)
SEPARATOR_PATTERN = re.compile(r"^\s*-{3,}\s*$", re.MULTILINE)
SUGGESTION_START_PATTERN = re.compile(r"(?:^|\s)(?=1\.\s)")
SUGGESTION_SPLIT_PATTERN = re.compile(r"\s+(?=\d+\.\s)")
SUGGESTION_ITEM_PATTERN = re.compile(r"^(\d+)\.\s[_*]*(.+?)[_*]*:\s*(.*)$", re.DOTALL)
URL_PATTERN = re.compile(r"(https?://[^\s]+)")
TRANSCRIPT_LINE_PATTERN = re.compile(
    r"^(?P<label>Interviewer|Candidate)\s*:\s*(?P<content>.*)$",
    re.DOTALL | re.IGNORECASE,
)

ROLE_LABELS = {"assistant": "Interviewer", "user": "Candidate"}
LABEL_ROLES = {label.lower(): role for role, label in ROLE_LABELS.items()}


def _clean_block(text: str) -> str:
    return SEPARATOR_PATTERN.sub("", text).strip()


def parse_roadmap_segments(text: str | None) -> list[dict[str, str]]:
    """Split roadmap Markdown into titled segments.

    Args:
        text (str | None): The roadmap Markdown.

    Returns:
        list[dict[str, str]]: `{title, content}` segments in document order.

    Notes:
        1. Empty text yields an empty list.
        2. A line consisting only of bold text (`**Week 1: ...**`) starts a new
           segment titled with that text. Inline bold text inside bullets does not.
        3. Text before the first header becomes a segment with an empty title.
        4. Text with no headers yields a single segment with an empty title.
        5. `---` separator lines are dropped.

    """
    if not text or not text.strip():
        return []

    headers = list(BOLD_HEADER_PATTERN.finditer(text))
    if not headers:
        return [{"title": "", "content": _clean_block(text)}]

    segments = []
    preamble = _clean_block(text[: headers[0].start()])
    if preamble:
        segments.append({"title": "", "content": preamble})

    for index, header in enumerate(headers):
        end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        segments.append(
            {
                "title": header.group("title").strip(),
                "content": _clean_block(text[header.end() : end]),
            }
        )
    return segments


def parse_suggestions(text: str | None) -> dict[str, Any]:
    """Split numbered suggestions into an introduction and titled items.

    Args:
        text (str | None): Suggestions in the form "Intro. 1. Title: description 2. ...".

    Returns:
        dict[str, Any]: `{intro, items}` where each item is `{number, title, description}`.
            An item without a "Title:" prefix has `number` None and an empty title.

    """
    if not text or not text.strip():
        return {"intro": "", "items": []}

    start = SUGGESTION_START_PATTERN.search(text)
    if start is None:
        return {
            "intro": "",
            "items": [{"number": None, "title": "", "description": text.replace("**", "").strip()}],
        }

    intro = text[: start.start()].strip()
    items_text = text[start.start() :]

    items = []
    for chunk in SUGGESTION_SPLIT_PATTERN.split(items_text):
        chunk = chunk.strip()
        if not chunk:
            continue
        match = SUGGESTION_ITEM_PATTERN.match(chunk)
        if match is None:
            items.append({"number": None, "title": "", "description": chunk.replace("**", "")})
            continue
        number, title, description = match.groups()
        items.append(
            {
                "number": int(number),
                "title": title.replace("**", "").strip(),
                "description": description.replace("**", "").strip(),
            }
        )
    return {"intro": intro, "items": items}


def render_transcript(messages: list[dict[str, Any]]) -> str:
    """Render messages as role-tagged paragraphs separated by a blank line.

    Args:
        messages (list[dict]): Messages with `role` ("assistant" or "user") and `content`.

    Returns:
        str: "Interviewer: ..." / "Candidate: ..." paragraphs.

    """
    paragraphs = []
    for message in messages:
        label = ROLE_LABELS.get(message.get("role", ""), "Unknown")
        paragraphs.append(f"{label}: {str(message.get('content', '')).strip()}")
    return "\n\n".join(paragraphs)


def parse_transcript(text: str | None) -> list[dict[str, str]]:
    """Parse role-tagged transcript paragraphs back into lines.

    Args:
        text (str | None): Transcript as written by `render_transcript`.

    Returns:
        list[dict[str, str]]: `{role, content}` lines. Only the "Interviewer" and
            "Candidate" labels start a line. Any other paragraph is appended to the
            previous line, or, when it comes first, returned with role "unknown".

    """
    if not text or not text.strip():
        return []

    lines: list[dict[str, str]] = []
    for paragraph in re.split(r"\n\s*\n", text.strip()):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        match = TRANSCRIPT_LINE_PATTERN.match(paragraph)
        if match:
            lines.append(
                {
                    "role": LABEL_ROLES[match.group("label").lower()],
                    "content": match.group("content").strip(),
                }
            )
        elif lines:
            lines[-1]["content"] = f"{lines[-1]['content']}\n\n{paragraph}"
        else:
            lines.append({"role": "unknown", "content": paragraph})
    return lines


def split_links(line: str) -> list[dict[str, Any]]:
    """Split a line into plain text and URL parts for link rendering.

    Returns:
        list[dict]: `{text, is_link}` parts in order, without empty parts.

    """
    parts = []
    for part in URL_PATTERN.split(line or ""):
        if not part:
            continue
        parts.append({"text": part, "is_link": bool(URL_PATTERN.fullmatch(part))})
    return parts
