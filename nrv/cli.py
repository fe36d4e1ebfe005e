"""
Operator console.

A small stdin REPL that runs next to the HTTP server. It shares the
process's trust boundary, so it issues invitation codes as the system
caller without a session.
"""

import logging
from typing import Callable

from .errors import StorageError
from .services import AuthService, Caller, ContentService

logger = logging.getLogger(__name__)

PROMPT = "> "
COMMANDS = ("generate-invite", "read-inquiries", "exit")


def generate_invite_cli(auth: AuthService) -> bool:
    """Generate an invitation code and print it."""
    result = auth.generate_invite(Caller.system())
    if not result.success:
        print(f"Failed to generate invitation code ({result.status.value})")
        return False

    print(f"Invitation code: {result.code}")
    return True


def read_inquiries_cli(content: ContentService) -> bool:
    """Print every stored inquiry."""
    try:
        inquiries = content.list_inquiries()
    except StorageError as e:
        logger.error(f"Could not read inquiries: {e}")
        print("Failed to read inquiries")
        return False

    if not inquiries:
        print("No inquiries.")
        return True

    for i in inquiries:
        print(f"\nName: {i.name}\nEmail: {i.email}\nMessage: {i.message}"
              f"\nIP Address: {i.ip_address}\nTimestamp: {i.timestamp}")
    return True


def run_command(command: str, auth: AuthService, content: ContentService) -> bool:
    """
    Run a single console command.

    Returns:
        False when the console should stop
    """
    if command == "generate-invite":
        generate_invite_cli(auth)
    elif command == "read-inquiries":
        read_inquiries_cli(content)
    elif command == "exit":
        return False
    elif command:
        print(f"Unknown command: {command}")
    return True


def run_console(
    auth: AuthService,
    content: ContentService,
    input_fn: Callable[[str], str] = input
):
    """
    Read commands until `exit` or end of input.

    Args:
        auth: Auth service used for invitation codes
        content: Content service used for inquiries
        input_fn: Line reader (default: builtin input)
    """
    while True:
        try:
            command = input_fn(PROMPT).strip()
        except EOFError:
            logger.info("Console input closed")
            return

        if not run_command(command, auth, content):
            return
