"""Decides which fixtures take part in a generation run."""

from __future__ import annotations

import logging

from src.shared.models.fixtures import AppliesTo, HttpTestCase

logger = logging.getLogger(__name__)


def accepts(fixture: HttpTestCase, active_protocol: str) -> bool:
    """True iff *fixture* targets the protocol being generated.

    Mismatches are expected in multi-protocol models and are not reported.
    """
    return fixture.protocol == active_protocol


def applies_to_client(fixture: HttpTestCase) -> bool:
    """Server-only fixtures exercise a server stack, not a client."""
    return fixture.applies_to is not AppliesTo.SERVER


def should_render(fixture: HttpTestCase, active_protocol: str) -> bool:
    if not accepts(fixture, active_protocol):
        return False
    if not applies_to_client(fixture):
        logger.debug("Skipping server-only protocol test %s", fixture.id)
        return False
    return True
