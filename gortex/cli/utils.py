"""CLI Utility Functions"""

import os
import subprocess
import sys
import tempfile

from gortex.domain import CommitMessage
from gortex.errors import ValidationError
from gortex.output import dim, info, print_error


def copy_to_clipboard(text: str) -> tuple[bool, str]:
    """Copy text to clipboard. Returns (success, failure_reason)."""
    try:
        if sys.platform == 'win32':
            subprocess.run(['clip'], input=text.encode('utf-8'), check=True)
        elif sys.platform == 'darwin':
            subprocess.run(['pbcopy'], input=text.encode('utf-8'), check=True)
        else:
            try:
                subprocess.run(['xclip', '-selection', 'clipboard'], input=text.encode('utf-8'), check=True)
            except FileNotFoundError:
                subprocess.run(['xsel', '--clipboard', '--input'], input=text.encode('utf-8'), check=True)
        return True, ""
    except FileNotFoundError:
        if sys.platform == 'linux':
            return False, "Install xclip or xsel: sudo apt install xclip"
        return False, "No clipboard tool found"
    except (subprocess.CalledProcessError, OSError) as e:
        return False, f"Clipboard command failed: {e}"


def edit_message(message: str) -> str | None:
    """Open message in user's editor. Returns edited text or None on failure."""
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'

    tmp = tempfile.NamedTemporaryFile(mode='w', suffix='.gitcommit', delete=False, encoding='utf-8')
    try:
        tmp.write(message)
        tmp.close()
        subprocess.run([editor, tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8') as f:
            edited = f.read().strip()
        return edited if edited else None
    except (subprocess.CalledProcessError, OSError):
        return None
    finally:
        try:
            os.unlink(tmp.name)
        except OSError as e:
            print(f"Warning: Could not delete temp file {tmp.name}: {e}", file=sys.stderr)


def _ask(label: str, default: str = "") -> str:
    suffix = f" {dim(f'[{default}]')}" if default else ""
    return input(f"{label}{suffix}: ").strip() or default


def prompt_manual_message(service) -> CommitMessage | None:
    """
    Ask for each commit field, re-prompting until the message validates.

    Returns None if the user aborts with Ctrl-C / Ctrl-D.
    """
    types = service.config.types
    print(f"\n{dim('Types:')} {info(', '.join(types))}")
    if service.config.scopes:
        print(f"{dim('Scopes:')} {info(', '.join(service.config.scopes))}")

    fields: dict = {}
    try:
        while True:
            fields["type"] = _ask("Type", fields.get("type", ""))
            fields["scope"] = _ask("Scope (optional)", fields.get("scope", ""))
            fields["subject"] = _ask("Subject", fields.get("subject", ""))
            fields["body"] = _ask("Body (optional)", fields.get("body", ""))
            breaking = _ask("Breaking change? [y/N]", "n").lower().startswith('y')
            description = _ask("Describe the breaking change") if breaking else None

            try:
                return service.create_manual(
                    type=fields["type"],
                    subject=fields["subject"],
                    scope=fields["scope"] or None,
                    body=fields["body"] or None,
                    breaking=breaking,
                    breaking_description=description,
                )
            except ValidationError as e:
                print_error(str(e))
                if e.field:
                    fields.pop(e.field, None)
    except (KeyboardInterrupt, EOFError):
        print()
        return None
