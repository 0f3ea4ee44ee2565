from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional

# Options accept both snake_case names and the camelCase wire spelling.
_OPTIONS_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RootOptions(BaseModel):
    model_config = _OPTIONS_CONFIG
    include_patterns: Optional[List[str]] = None
    exclude_patterns: Optional[List[str]] = None
    use_git_ignore: Optional[bool] = None


class SearchOptions(BaseModel):
    model_config = _OPTIONS_CONFIG
    root_uris: Optional[List[str]] = None
    root_options: Optional[Dict[str, RootOptions]] = None
    fuzzy_match: bool = True
    # None means unbounded; zero or negative values yield an empty result.
    limit: Optional[int] = None
    use_git_ignore: bool = True
    include_patterns: Optional[List[str]] = None
    exclude_patterns: Optional[List[str]] = None

    def normalized_root_options(self) -> Dict[str, RootOptions]:
        """
        Build the per-root options actually searched.

        Seeds an entry for every root URI that has none, appends the global
        globs after each root's own globs and inherits use_git_ignore where the
        root leaves it unset. The options object itself is left untouched.
        """
        roots: Dict[str, RootOptions] = {
            uri: opts.model_copy(deep=True) for uri, opts in (self.root_options or {}).items()
        }
        for uri in self.root_uris or []:
            if uri not in roots:
                roots[uri] = RootOptions()

        for opts in roots.values():
            if self.include_patterns is not None:
                opts.include_patterns = [*(opts.include_patterns or []), *self.include_patterns]
            if self.exclude_patterns is not None:
                opts.exclude_patterns = [*(opts.exclude_patterns or []), *self.exclude_patterns]
            if opts.use_git_ignore is None:
                opts.use_git_ignore = self.use_git_ignore
        return roots


class FileSearchReport(BaseModel):
    files: List[str] = Field(default_factory=list)
    roots_searched: int = 0
    failed_roots: List[str] = Field(default_factory=list)
    # Roots whose listing broke off after some candidates were delivered.
    partial_roots: List[str] = Field(default_factory=list)
    cancelled: bool = False
    exact_count: int = 0
    fuzzy_count: int = 0

    @property
    def all_roots_failed(self) -> bool:
        return not self.files and self.roots_searched > 0 and len(self.failed_roots) == self.roots_searched
