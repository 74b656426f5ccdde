from typing import Awaitable, Callable, Iterable, List, Optional


class MigrationStep(object):
    def __init__(
        self,
        key: str,
        description: str,
        handler: Callable[[], Awaitable[None]],
        skip: bool = False,
        required: bool = False,
    ):
        self.key = key
        self.description = description
        self.handler = handler
        self.skip = skip
        # required steps bind the state every later step reads
        self.required = required

    def __repr__(self):
        return f"MigrationStep({self.key!r}, skip={self.skip}, required={self.required})"


def select_steps(
    steps: List[MigrationStep],
    only: Optional[Iterable[str]] = None,
    stop_after: Optional[str] = None,
    include_skipped: bool = False,
) -> List[MigrationStep]:
    """
    Picks the steps to run, keeping their declared order.
    Steps flagged `skip` only run when `include_skipped` is set or they are named in `only`.
    Steps flagged `required` are kept whenever `only` is given.
    """
    known_keys = [step.key for step in steps]
    only = list(only or [])

    unknown = [key for key in only + ([stop_after] if stop_after else []) if key not in known_keys]
    if unknown:
        raise ValueError(f"Unknown migration steps: {', '.join(unknown)}")

    selected = []
    for step in steps:
        if only:
            if step.required or step.key in only:
                selected.append(step)
        elif include_skipped or not step.skip:
            selected.append(step)

        if step.key == stop_after:
            break

    return selected
