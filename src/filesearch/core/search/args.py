from typing import List

from filesearch.core.constants import GLOB_FLAG, LIST_FILES_FLAGS, NEGATED_GLOB_PREFIX, NO_IGNORE_FLAG
from filesearch.core.models import RootOptions


def build_search_args(options: RootOptions) -> List[str]:
    """
    Command line of the listing tool for one root.

    Empty globs are skipped; glob syntax itself is left for the tool to judge.
    """
    args = list(LIST_FILES_FLAGS)
    for include_pattern in options.include_patterns or []:
        if include_pattern:
            args.extend([GLOB_FLAG, include_pattern])
    for exclude_pattern in options.exclude_patterns or []:
        if exclude_pattern:
            args.extend([GLOB_FLAG, f"{NEGATED_GLOB_PREFIX}{exclude_pattern}"])
    if not options.use_git_ignore:
        args.append(NO_IGNORE_FLAG)
    return args
