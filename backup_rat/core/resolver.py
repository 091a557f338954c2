"""Target selection and per-target settings resolution."""

from typing import List, Sequence

from .models import GlobalSettings, Target, host_parallelism

ALL_SELECTOR = "all"


def resolve_targets(selector: str, targets: Sequence[Target]) -> List[Target]:
    """Pick the targets a selector refers to, in configuration order.

    ``all`` selects every non-optional target. Any other selector selects
    every target with exactly that tag, optional or not.
    """
    if selector == ALL_SELECTOR:
        return [target for target in targets if not target.optional]
    return [target for target in targets if target.tag == selector]


def resolve_multi_threaded(target: Target, settings: GlobalSettings) -> bool:
    if target.multi_threaded_override is not None:
        return target.multi_threaded_override
    return settings.multi_threaded


def resolve_thread_count(target: Target, settings: GlobalSettings) -> int:
    """Number of copy workers for a target.

    Target override first, then the global setting, then host parallelism.
    Always 1 when multi-threading is off for the target.
    """
    if not resolve_multi_threaded(target, settings):
        return 1
    if target.thread_count_override:
        return target.thread_count_override
    if settings.thread_count:
        return settings.thread_count
    return host_parallelism()
