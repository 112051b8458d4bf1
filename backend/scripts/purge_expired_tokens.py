"""Delete expired email verification and password reset tokens.

Meant to be run periodically by an external scheduler (cron, k8s CronJob).
"""

from __future__ import annotations

import asyncio
import logging

from app.db.session import get_sessionmaker
from app.services.token_service import reset_tokens, verification_tokens

logger = logging.getLogger(__name__)


async def purge_expired_tokens() -> tuple[int, int]:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        verification_removed = await verification_tokens().purge_expired(session)
        reset_removed = await reset_tokens().purge_expired(session)
    return verification_removed, reset_removed


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    verification_removed, reset_removed = asyncio.run(purge_expired_tokens())
    print(
        f"Removed {verification_removed} verification token(s) and "
        f"{reset_removed} password reset token(s)."
    )


if __name__ == "__main__":
    main()
