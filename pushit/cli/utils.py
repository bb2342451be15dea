"""CLI Utility Functions"""

import os
import subprocess
import sys
import tempfile

from pushit.output import dim, info

COMMIT = 'commit'
COMMIT_PUSH = 'commit_push'
REGENERATE = 'regenerate'
EDIT = 'edit'
CANCEL = 'cancel'


def action_menu(can_push: bool) -> list[tuple[str, str, str]]:
    """Return (key, action, label) entries for the post-generation menu."""
    first = ('c', COMMIT_PUSH, 'commit and push') if can_push else ('c', COMMIT, 'commit')
    return [
        first,
        ('r', REGENERATE, 'regenerate'),
        ('e', EDIT, 'edit'),
        ('q', CANCEL, 'cancel'),
    ]


def choose_action(can_push: bool) -> str:
    """Ask what to do with the generated message. Ctrl-C and EOF cancel."""
    menu = action_menu(can_push)
    by_key = {key: action for key, action, _ in menu}
    labels = "  ".join(f"{info(f'[{key}]')} {label}" for key, _, label in menu)

    while True:
        try:
            choice = input(f"{labels} {dim('[c]: ')}").strip().lower()
        except (KeyboardInterrupt, EOFError):
            print()
            return CANCEL
        if choice == '':
            return by_key['c']
        if choice in by_key:
            return by_key[choice]
        print(f"Enter one of: {', '.join(by_key)}")


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
            # Log to stderr so temp files don't silently accumulate
            print(f"Warning: Could not delete temp file {tmp.name}: {e}", file=sys.stderr)
