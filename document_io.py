"""
Document file plumbing for the host shell
The editor document is an opaque JSON tree saved as UTF-8 text.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

import chardet

# Block nodes whose inline text forms one line on the page
TEXT_BLOCKS = frozenset(['paragraph', 'heading', 'codeBlock'])


class DocumentCorruptedError(ValueError):
    """Raised when a saved document cannot be parsed back into a tree"""


@dataclass
class SaveResult:
    success: bool
    file_path: Optional[str] = None
    error: Optional[str] = None


@dataclass
class OpenResult:
    canceled: bool
    content: Optional[str] = None
    file_path: Optional[str] = None
    error: Optional[str] = None


def empty_document() -> Dict:
    return {'type': 'doc', 'content': [{'type': 'paragraph'}]}


def serialize_document(tree: Dict) -> str:
    return json.dumps(tree, ensure_ascii=False)


def parse_document(content: str) -> Dict:
    """Parse a saved blob; the only check is that it is a typed JSON node"""
    try:
        tree = json.loads(content)
    except (TypeError, ValueError) as e:
        raise DocumentCorruptedError(f"File corrupted: {e}") from e
    if not isinstance(tree, dict) or 'type' not in tree:
        raise DocumentCorruptedError("File corrupted: document root is not a node")
    return tree


def _decode(raw_data: bytes) -> str:
    try:
        return raw_data.decode('utf-8')
    except UnicodeDecodeError:
        pass
    # UTF-8 already failed, so chardet's best guess beats dropping bytes
    encoding_result = chardet.detect(raw_data)
    encoding = encoding_result['encoding']
    if encoding:
        try:
            content = raw_data.decode(encoding)
            logging.info(f"Decoded document as {encoding} "
                         f"(confidence {encoding_result['confidence']:.2f})")
            return content
        except (UnicodeDecodeError, LookupError):
            pass
    logging.warning("Document is not valid UTF-8, undecodable bytes dropped")
    return raw_data.decode('utf-8', errors='ignore')


def save_document(content: str, file_path: Optional[str] = None,
                  ask_path: Optional[Callable[[], Optional[str]]] = None) -> SaveResult:
    """
    Write the document blob. Without a known path, ask_path is consulted
    (Save As); a cancelled prompt is reported as an unsuccessful save.
    """
    target_path = file_path
    if not target_path:
        target_path = ask_path() if ask_path else None
        if not target_path:
            return SaveResult(success=False)

    try:
        Path(target_path).write_text(content, encoding='utf-8')
    except OSError as e:
        logging.error(f"Failed to save file: {e}")
        return SaveResult(success=False, error=str(e))

    logging.info(f"Saved document to {target_path}")
    return SaveResult(success=True, file_path=str(target_path))


def open_document(file_path: Optional[str] = None,
                  ask_path: Optional[Callable[[], Optional[str]]] = None) -> OpenResult:
    target_path = file_path or (ask_path() if ask_path else None)
    if not target_path:
        return OpenResult(canceled=True)

    try:
        raw_data = Path(target_path).read_bytes()
    except OSError as e:
        logging.error(f"Failed to open file: {e}")
        return OpenResult(canceled=True, error=str(e))

    return OpenResult(canceled=False, content=_decode(raw_data), file_path=str(target_path))


def _child_nodes(node: Dict) -> List[Dict]:
    """Element children of a node; malformed content yields nothing"""
    content = node.get('content')
    if not isinstance(content, list):
        return []
    return [child for child in content if isinstance(child, dict)]


def _inline_text(node: Dict, lines: List[str]):
    for child in _child_nodes(node):
        kind = child.get('type')
        if kind == 'text':
            lines[-1] += child.get('text', '')
        elif kind == 'hardBreak':
            lines.append('')
        else:
            _inline_text(child, lines)


def document_paragraphs(tree: Dict) -> List[str]:
    """Flatten the editor tree into one string per block (hard breaks split blocks)"""
    paragraphs = []
    for node in _child_nodes(tree):
        if node.get('type') in TEXT_BLOCKS:
            lines = ['']
            _inline_text(node, lines)
            paragraphs.extend(lines)
        else:
            # Lists, quotes and other containers hold blocks of their own
            paragraphs.extend(document_paragraphs(node))
    return paragraphs
