"""Interactive account deletion from a terminal.

Drives DeletionWizard against a running API: asks for an email or phone
number, then for the code that was sent, then reports the outcome.
Entering "c" at the code prompt goes back to change the identifier.

Usage:
    cd backend && python -m scripts.delete_account [--base-url URL]
"""

import argparse
import logging
from collections.abc import Callable

from app.client.deletion_client import DeletionApiClient
from app.client.deletion_wizard import DeletionWizard, WizardPhase

logger = logging.getLogger(__name__)

_CHANGE_IDENTIFIER = "c"


async def run_wizard(
    wizard: DeletionWizard,
    prompt: Callable[[str], str] = input,
    echo: Callable[[str], None] = print,
) -> WizardPhase:
    """Walk the wizard to SUCCESS, or until input runs out.

    Args:
        wizard: Wizard to drive.
        prompt: Line reader (``input`` by default).
        echo: Line writer (``print`` by default).

    Returns:
        The phase the wizard ended in.
    """
    try:
        while wizard.phase is not WizardPhase.SUCCESS:
            if wizard.phase is WizardPhase.INPUT:
                wizard.set_identifier(prompt("Email or phone number: "))
                wizard.reason = prompt("Reason for leaving (optional): ")
                if await wizard.submit_identifier():
                    echo(wizard.message or "Verification code sent.")
            else:
                entry = prompt("6-digit code (c to change identifier): ").strip()
                if entry.lower() == _CHANGE_IDENTIFIER:
                    wizard.change_identifier()
                    continue
                wizard.set_code(entry)
                await wizard.submit_code()

            if wizard.error:
                echo(f"Error: {wizard.error}")
    except EOFError:
        logger.info("Input closed in phase %s", wizard.phase.value)
        return wizard.phase

    echo(wizard.message or "Account deleted.")
    return wizard.phase


async def main() -> None:
    """CLI entry point."""
    import sys

    from app.core.config import settings

    parser = argparse.ArgumentParser(description="Delete a storefront account.")
    parser.add_argument(
        "--base-url",
        default=f"http://localhost:{settings.api_port}",
        help="API root (default: local server)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    wizard = DeletionWizard(DeletionApiClient(args.base_url))
    phase = await run_wizard(wizard)
    sys.exit(0 if phase is WizardPhase.SUCCESS else 1)


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
