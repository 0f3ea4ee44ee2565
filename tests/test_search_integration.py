import shutil
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from filesearch.core.cancellation import CancellationTokenSource
from filesearch.core.models import SearchOptions
from filesearch.core.search.ripgrep import RipgrepBackend
from filesearch.core.search.walker import WalkBackend
from filesearch.core.search_service import FileSearchService


def _service(backend):
    return FileSearchService(backend=backend, logger=MagicMock())


@pytest.mark.asyncio
async def test_walk_search_across_nested_roots_reports_each_file_once(workspace):
    service = _service(WalkBackend())

    result = await service.find("", SearchOptions(root_uris=[str(workspace), str(workspace / "src")]))

    assert sorted(result) == sorted(
        [
            (workspace / "README.md").as_uri(),
            (workspace / "src" / "a.ts").as_uri(),
            (workspace / "src" / "b.ts").as_uri(),
        ]
    )


@pytest.mark.asyncio
async def test_walk_search_missing_root_is_reported_not_raised(workspace, tmp_path):
    service = _service(WalkBackend())
    missing = str(tmp_path / "missing")

    report = await service.search("b.ts", SearchOptions(root_uris=[missing, workspace.as_uri()]))

    assert report.files == [(workspace / "src" / "b.ts").as_uri()]
    assert report.failed_roots == [missing]
    assert report.roots_searched == 2


@pytest.mark.asyncio
async def test_walk_search_with_per_root_globs(workspace, tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text("# guide\n", encoding="utf-8")
    (docs / "guide.ts").write_text("//\n", encoding="utf-8")
    service = _service(WalkBackend())

    result = await service.find(
        "guide",
        {
            "rootUris": [str(workspace)],
            "rootOptions": {str(docs): {"includePatterns": ["*.md"]}},
        },
    )

    assert result == [(docs / "guide.md").as_uri()]


@pytest.mark.asyncio
async def test_walk_search_limit_with_cancellable_token(workspace):
    source = CancellationTokenSource()
    service = _service(WalkBackend())

    report = await service.search("", SearchOptions(root_uris=[str(workspace)], limit=2), source.token)

    assert len(report.files) == 2
    assert report.cancelled is False
    # the client's token is untouched by the internal early stop
    assert source.token.is_cancellation_requested is False


@pytest.mark.asyncio
async def test_ripgrep_search_with_missing_tool_fails_every_root(workspace, tmp_path):
    service = _service(RipgrepBackend(str(tmp_path / "no-such-rg")))

    report = await service.search("a", SearchOptions(root_uris=[str(workspace)]))

    assert report.files == []
    assert report.all_roots_failed is True


@pytest.mark.asyncio
async def test_fake_tool_output_flows_through_ranking(workspace, fake_tool):
    tool = fake_tool("printf 'src/a.ts\\nsrc/b.ts\\nREADME.md\\n'")
    service = _service(RipgrepBackend(tool))

    report = await service.search("rdm", SearchOptions(root_uris=[str(workspace)]))

    assert report.files == [(workspace / "README.md").as_uri()]
    assert report.fuzzy_count == 1


@pytest.mark.asyncio
@pytest.mark.skipif(shutil.which("rg") is None, reason="ripgrep is not installed")
async def test_ripgrep_and_walk_backends_agree(workspace):
    (workspace / ".git").mkdir()
    (workspace / ".gitignore").write_text("*.log\n", encoding="utf-8")
    (workspace / "trace.log").write_text("x", encoding="utf-8")
    options = SearchOptions(root_uris=[str(workspace)])

    walked = await _service(WalkBackend()).find("", options)
    listed = await _service(RipgrepBackend(shutil.which("rg"))).find("", options)

    assert sorted(walked) == sorted(listed)


@pytest.mark.asyncio
async def test_default_structlog_logger_records_failed_root(workspace, tmp_path):
    service = FileSearchService(backend=WalkBackend())
    missing = str(tmp_path / "missing")

    with capture_logs() as logs:
        report = await service.search("a.ts", SearchOptions(root_uris=[missing, str(workspace)]))

    assert report.files == [(workspace / "src" / "a.ts").as_uri()]
    failed = [entry for entry in logs if entry["event"] == "root_search_failed"]
    assert len(failed) == 1
    assert failed[0]["root"] == missing
    assert failed[0]["log_level"] == "warning"
