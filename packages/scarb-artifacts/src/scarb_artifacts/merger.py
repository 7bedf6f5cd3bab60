"""Merge artifacts of several manifests into one mapping.

When a package is built both as unit tests and integration tests, each build
writes its own manifest. The integration build is the base source; other
builds only contribute contracts the base does not define.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from scarb_artifacts.locations import ArtifactManifestLocation
from scarb_artifacts.materializer import ArtifactMap
from scarb_artifacts.metadata import TestType
from scarb_artifacts.observability import get_logger

BASE_TEST_TYPE = TestType.INTEGRATION

ArtifactLoader = Callable[[ArtifactManifestLocation], ArtifactMap]


def order_by_precedence(
    locations: Sequence[ArtifactManifestLocation],
) -> list[ArtifactManifestLocation]:
    """Rank manifest locations from highest to lowest precedence.

    The first integration-test location is the base; without one, the first
    location is. All other locations follow in their original order.

    Returns:
        `[base, *overlays]`, or an empty list for no locations.
    """
    if not locations:
        return []
    base = next(
        (location for location in locations if location.test_type == BASE_TEST_TYPE),
        locations[0],
    )
    return [base, *(location for location in locations if location != base)]


def merge_contracts_artifacts(
    locations: Sequence[ArtifactManifestLocation],
    load: ArtifactLoader,
) -> ArtifactMap:
    """Load every location and merge the results.

    A contract name already in the result is never replaced, so each name
    resolves to the highest-precedence manifest that defines it, together
    with that manifest's Sierra path. Errors raised by `load` propagate;
    a failing overlay is not skipped.

    Args:
        locations: Existing manifest locations.
        load: Loads and materializes one location.
    """
    ranked = order_by_precedence(locations)
    if not ranked:
        return {}

    base, *overlays = ranked
    log = get_logger()
    merged = dict(load(base))

    for overlay in overlays:
        for name, value in load(overlay).items():
            if name in merged:
                log.debug(
                    "overlay_contract_skipped",
                    contract=name,
                    overlay=str(overlay.path),
                )
                continue
            merged[name] = value

    return merged
