"""
Kestrel Programming Language - Main Entry Point
A small expression-oriented language with closures
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional
import os

from termcolor import colored

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import KestrelParseError, format_parse_error
from lexer import tokenize_all
from parsing import create_parser, create_debug_parser, pretty_print_ast
from session import Session
from tokens import KEYWORDS
from utilities import KestrelRuntimeError


VERSION = "Kestrel v0.1.0"
PROMPT = ">> "
HISTORY_FILE = "~/.kestrel_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='kestrel',
      description='Kestrel Programming Language - integers, strings, closures',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.ks             # Run a Kestrel script
  %(prog)s -i                    # Interactive mode
  %(prog)s --tokens script.ks    # Show the token stream
  %(prog)s --parse script.ks     # Parse and show the AST
  %(prog)s --debug script.ks     # Run with debug output
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Kestrel script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show the tokens (for debugging)'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the AST (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def error_text(text: str) -> str:
  return colored(text, 'red', attrs=['bold'])


def print_parse_errors(errors: List[str], diagnostics: Optional[List[dict]] = None,
                       filename: str = "<input>") -> None:
  """Print syntax errors, with source context when diagnostics are available"""
  print(error_text(f"  ERROR: Got {len(errors)} parsing errors"), file=sys.stderr)
  if diagnostics:
    for diagnostic in diagnostics:
      print(format_parse_error(diagnostic, filename), file=sys.stderr)
  else:
    for message in errors:
      print(f"    {message}", file=sys.stderr)


def read_source(script_path: str) -> str:
  with open(script_path, 'r', encoding='utf-8') as f:
    return f.read()


def tokens_file(script_path: str) -> int:
  """Show the token stream of a script"""
  for token in tokenize_all(read_source(script_path)):
    print(f"{token.offset:6d}  {token}")
  return 0


def parse_file(script_path: str, debug: bool = False) -> int:
  """Parse a Kestrel script file and show the AST"""
  parser = create_debug_parser() if debug else create_parser()
  try:
    program = parser.parse_file(script_path)
  except KestrelParseError as e:
    print(error_text(str(e)), file=sys.stderr)
    return 1

  print(f"Parsed {len(program.statements)} top-level statements:")
  print("=" * 50)
  print(pretty_print_ast(program))
  print(f"Canonical form: {program.as_string()}")
  return 0


def run_script_file(script_path: str, debug: bool = False) -> int:
  """Run a Kestrel script file and print its result"""
  session = Session(debug=debug)
  result = session.run(read_source(script_path))

  if result.errors:
    print_parse_errors(result.errors, result.diagnostics, script_path)
    return 1

  if not result.ok:
    print(error_text(result.value.inspect()), file=sys.stderr)
    return 1

  print(result.display())
  return 0


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet

  readline.set_history_length(1000)

  completions = sorted(KEYWORDS) + [":tokens", ":parse", ":env", ":help", "exit"]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def handle_command(code: str, session: Session) -> bool:
  """Run a ':' REPL command; returns False if code is not a command"""
  parser = create_parser(session.debug)

  if code.startswith(":tokens "):
    for token in tokenize_all(code[len(":tokens "):]):
      print(f"  {token}")
    return True

  if code.startswith(":parse "):
    result = parser.parse_string(code[len(":parse "):])
    if result.errors:
      print_parse_errors(result.errors)
    else:
      print(result.program.as_string())
    return True

  if code.strip() == ":env":
    bindings = session.bindings()
    if not bindings:
      print("  (no bindings)")
    for name, value in bindings.items():
      val_str = value.inspect().replace('\n', ' ')
      if len(val_str) > 60:
        val_str = val_str[:57] + "..."
      print(f"  {name} = {val_str}")
    return True

  if code.strip() == ":help":
    print("REPL Commands:")
    print("  :tokens <src>     - Show the token stream")
    print("  :parse <src>      - Show the canonical parenthesized form")
    print("  :env              - Show current bindings")
    print("  :help             - Show this help")
    print("  exit              - Exit REPL (an empty line also exits)")
    return True

  return False


def run_interactive_mode(debug: bool = False) -> None:
  """Run Kestrel in interactive mode; bindings persist across lines"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  session = Session(debug=debug)

  while True:
    try:
      code = input(PROMPT)
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if not code.strip() or code.strip() == "exit":
      break

    if handle_command(code, session):
      continue

    try:
      result = session.run(code)
    except KestrelRuntimeError as e:
      print(error_text(f"Runtime Error: {e.message}"))
      continue

    if result.errors:
      print_parse_errors(result.errors, result.diagnostics)
      continue

    output = result.display()
    print(error_text(output) if not result.ok else output)


def main(argv: Optional[List[str]] = None) -> int:
  """Main entry point for Kestrel"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script:
    if not Path(args.script).exists():
      print(error_text(f"Error: Script file '{args.script}' does not exist"), file=sys.stderr)
      return 1

    try:
      if args.tokens:
        return tokens_file(args.script)
      if args.parse:
        return parse_file(args.script, debug=args.debug)
      return run_script_file(args.script, debug=args.debug)
    except UnicodeDecodeError as e:
      print(error_text(f"Error: Cannot decode file '{args.script}': {e}"), file=sys.stderr)
      return 1
    except KestrelRuntimeError as e:
      print(error_text(f"Runtime Error in '{args.script}': {e.message}"), file=sys.stderr)
      return 1

  run_interactive_mode(debug=args.debug)
  return 0


if __name__ == "__main__":
  sys.exit(main())
