"""
Syntax diagnostics for the Kestrel parser
Turns (message, offset) pairs collected during parsing into located,
printable diagnostics
"""

from typing import Dict, List, Optional, Tuple

from pyparsing import col, line, lineno


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    got: Optional[str] = None,
    context: Optional[str] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'got': got,
        'context': context,
    }


def format_parse_error(error: Dict, filename: str = "<input>") -> str:
    """Format parse error as string"""
    error_msg = f"{filename}:{error['line']}:{error['column']}: {error['message']}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"{error['context']}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def locate(source_text: str, location: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of a character offset"""
    if not source_text:
        return 1, 1
    location = min(max(location, 0), len(source_text))
    return lineno(location, source_text), col(location, source_text)


def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 1) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:  # Error line
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^")

    return '\n'.join(context_parts)


def extract_got(source_text: str, location: int) -> str:
    """Extract the source text found at the error location"""
    if location >= len(source_text):
        return "end of input"

    got_text = line(location, source_text)[col(location, source_text) - 1:][:10].strip()
    if got_text:
        return f"'{got_text}'"
    return "end of line"


def build_diagnostics(source_text: str, issues: List[Tuple[str, int]]) -> List[Dict]:
    """Convert collected (message, offset) pairs into diagnostic dicts"""
    diagnostics = []
    for message, location in issues:
        line_num, col_num = locate(source_text, location)
        diagnostics.append(make_parse_error(
            message=message,
            location=location,
            line=line_num,
            column=col_num,
            got=extract_got(source_text, location),
            context=get_context_lines(source_text, line_num, col_num) if source_text else None
        ))
    return diagnostics


# ============================================================================
# EXCEPTIONS
# ============================================================================

class KestrelParseError(Exception):
    """Raised by entry points that require a clean parse"""

    def __init__(self, diagnostics: List[Dict], filename: str = "<input>"):
        self.diagnostics = diagnostics
        self.filename = filename
        self.messages = [d['message'] for d in diagnostics]
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        count = len(self.diagnostics)
        header = f"{count} syntax error{'s' if count != 1 else ''} in {self.filename}"
        body = "".join(format_parse_error(d, self.filename) for d in self.diagnostics)
        return f"{header}\n{body}".rstrip()
