"""End-to-end tests for analyze_workspace on real directory trees."""

from pathlib import Path
from unittest.mock import patch

import pytest

from depgraph import AnalysisCancelled, AnalyzerConfig, CancellationToken, analyze_workspace
from depgraph.models import DependencyEdge
from depgraph.pipeline import DependencyGraphAnalyzer
from depgraph.scanner.file_collector import PERMISSION_WARNING

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE = FIXTURES / "sample_project"


def _touch(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _edges(graph):
    return {(e.source, e.target) for e in graph.edges}


class _CancelAfter:
    """Token stand-in that reports cancelled after *checks* polls."""

    def __init__(self, checks: int):
        self.remaining = checks
        self.calls = 0

    def raise_if_cancelled(self):
        self.calls += 1
        if self.calls > self.remaining:
            raise AnalysisCancelled()


# ── Scenarios ─────────────────────────────────────────────────

class TestScenarios:
    def test_single_import(self, tmp_path):
        _touch(tmp_path, "a.ts", "import { X } from './b';\n")
        _touch(tmp_path, "b.ts", "export const X = 1;\n")

        graph = analyze_workspace(tmp_path, config=AnalyzerConfig())

        assert sorted(n.id for n in graph.nodes) == ["a.ts", "b.ts"]
        assert graph.edges == [DependencyEdge("a.ts", "b.ts")]
        assert not any(n.has_cycle for n in graph.nodes)

    def test_mutual_import(self, tmp_path):
        _touch(tmp_path, "a.ts", "import { B } from './b';\nexport const A = 1;\n")
        _touch(tmp_path, "b.ts", "import { A } from './a';\nexport const B = 2;\n")

        graph = analyze_workspace(tmp_path, config=AnalyzerConfig())

        assert len(graph.nodes) == 2
        assert _edges(graph) == {("a.ts", "b.ts"), ("b.ts", "a.ts")}
        assert all(n.has_cycle for n in graph.nodes)

    def test_leading_slash_filter(self, tmp_path):
        _touch(tmp_path, "src/a.ts", "import './b';\n")
        _touch(tmp_path, "src/b.ts", "")
        _touch(tmp_path, "scripts/c.ts", "import '../src/a';\n")

        with_slash = analyze_workspace(tmp_path, "/src", config=AnalyzerConfig())
        without = analyze_workspace(tmp_path, "src", config=AnalyzerConfig())

        assert [n.id for n in with_slash.nodes] == ["src/a.ts", "src/b.ts"]
        assert [n.id for n in with_slash.nodes] == [n.id for n in without.nodes]
        assert _edges(with_slash) == {("src/a.ts", "src/b.ts")}

    def test_sample_project(self):
        graph = analyze_workspace(SAMPLE, config=AnalyzerConfig())

        assert sorted(n.id for n in graph.nodes) == [
            "src/app.ts",
            "src/circular/ping.ts",
            "src/circular/pong.ts",
            "src/models/order.ts",
            "src/services/orderService.ts",
            "src/utils/format.js",
            "src/utils/logger.ts",
            "src/widgets/Button.jsx",
            "src/widgets/index.tsx",
        ]
        assert _edges(graph) == {
            ("src/app.ts", "src/services/orderService.ts"),
            ("src/app.ts", "src/utils/logger.ts"),
            ("src/app.ts", "src/models/order.ts"),
            ("src/services/orderService.ts", "src/models/order.ts"),
            ("src/services/orderService.ts", "src/utils/logger.ts"),
            ("src/utils/format.js", "src/utils/logger.ts"),
            ("src/circular/ping.ts", "src/circular/pong.ts"),
            ("src/circular/pong.ts", "src/circular/ping.ts"),
            ("src/widgets/index.tsx", "src/utils/format.js"),
            ("src/widgets/Button.jsx", "src/utils/format.js"),
        }
        assert {n.id for n in graph.cycle_nodes()} == {
            "src/circular/ping.ts", "src/circular/pong.ts",
        }

    def test_sample_project_with_settings_exclude(self):
        config = AnalyzerConfig(exclude=["circular/", "widgets"])
        graph = analyze_workspace(SAMPLE, config=config)
        ids = {n.id for n in graph.nodes}
        # settings replace the defaults entirely, so node_modules and tests come back
        assert "node_modules/left-pad/index.js" in ids
        assert "src/app.test.ts" in ids
        assert not any(i.startswith("src/circular/") or i.startswith("src/widgets/") for i in ids)

    def test_settings_bang_pattern_does_not_reinclude(self, tmp_path):
        _touch(tmp_path, "main.ts", "")
        _touch(tmp_path, "lib/a.ts", "")
        _touch(tmp_path, "lib/keep.ts", "")

        config = AnalyzerConfig(exclude=["lib/*.ts", "!lib/keep.ts"])
        graph = analyze_workspace(tmp_path, config=config)

        assert [n.id for n in graph.nodes] == ["main.ts"]

    def test_depgraphignore_governs_collection(self, tmp_path):
        _touch(tmp_path, "src/a.ts", "import './legacy/old';\n")
        _touch(tmp_path, "src/legacy/old.ts", "")
        _touch(tmp_path, ".depgraphignore", "legacy\n")

        graph = analyze_workspace(tmp_path, config=AnalyzerConfig())

        assert [n.id for n in graph.nodes] == ["src/a.ts"]
        assert graph.nodes[0].dependencies == ["src/legacy/old.ts"]
        assert graph.edges == []

    def test_unparseable_file_does_not_stop_analysis(self, tmp_path):
        _touch(tmp_path, "a.ts", "import './b';\n")
        _touch(tmp_path, "b.ts", "")
        real_read_bytes = Path.read_bytes

        def fake_read_bytes(self):
            if self.name == "b.ts":
                raise OSError("boom")
            return real_read_bytes(self)

        with patch.object(Path, "read_bytes", fake_read_bytes):
            graph = analyze_workspace(tmp_path, config=AnalyzerConfig())

        assert [n.id for n in graph.nodes] == ["a.ts"]
        assert graph.nodes[0].dependencies == ["b.ts"]
        assert graph.edges == []

    def test_scan_failure_gives_empty_graph_and_warning(self, tmp_path):
        _touch(tmp_path, "a.ts", "")
        warnings: list[str] = []

        def failing_walk(top, *args, **kwargs):
            kwargs["onerror"](PermissionError(13, "Permission denied", str(top)))
            yield from ()

        with patch("depgraph.scanner.file_collector.os.walk", failing_walk):
            graph = analyze_workspace(tmp_path, config=AnalyzerConfig(), on_warning=warnings.append)

        assert graph.nodes == []
        assert graph.edges == []
        assert warnings == [PERMISSION_WARNING]

    def test_progress_reported(self, tmp_path):
        _touch(tmp_path, "a.ts", "")
        stages: list[tuple[str, int, int]] = []
        analyze_workspace(tmp_path, config=AnalyzerConfig(), progress=lambda *a: stages.append(a))
        assert stages[0] == ("Collecting", 0, 1)
        assert ("Analyzing", 1, 1) in stages

    def test_config_loaded_from_workspace_when_not_given(self, tmp_path):
        _touch(tmp_path, "a.ts", "")
        _touch(tmp_path, "gen/b.ts", "")
        _touch(tmp_path, ".depgraph.json", '{"exclude": ["gen/"]}')

        with patch("depgraph.config._CONFIG_FILE", tmp_path / "no-user-config.json"):
            graph = analyze_workspace(tmp_path)

        assert [n.id for n in graph.nodes] == ["a.ts"]

    def test_each_run_builds_a_fresh_graph(self, tmp_path):
        _touch(tmp_path, "a.ts", "")
        analyzer = DependencyGraphAnalyzer(tmp_path, config=AnalyzerConfig())
        first = analyzer.analyze_workspace()
        _touch(tmp_path, "b.ts", "import './a';\n")
        second = analyzer.analyze_workspace()
        assert first is not second
        assert len(first.nodes) == 1
        assert len(second.nodes) == 2


# ── Cancellation ──────────────────────────────────────────────

class TestCancellation:
    def test_cancelled_before_start(self, tmp_path):
        _touch(tmp_path, "a.ts", "")
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AnalysisCancelled):
            analyze_workspace(tmp_path, cancellation_token=token, config=AnalyzerConfig())

    def test_cancelled_during_collection(self, tmp_path):
        _touch(tmp_path, "a.ts", "")
        token = CancellationToken()
        analyzer = DependencyGraphAnalyzer(tmp_path, config=AnalyzerConfig())
        real_collect = analyzer.collect_files

        def collect_then_cancel(filter_pattern=None):
            files = real_collect(filter_pattern)
            token.cancel()
            return files

        with patch.object(analyzer, "collect_files", collect_then_cancel):
            with pytest.raises(AnalysisCancelled):
                analyzer.analyze_workspace(cancellation_token=token)

    @pytest.mark.parametrize("checks", [0, 1, 2, 3, 4, 5])
    def test_every_phase_checks_the_token(self, tmp_path, checks):
        _touch(tmp_path, "a.ts", "import './b';\n")
        _touch(tmp_path, "b.ts", "")
        token = _CancelAfter(checks)
        with pytest.raises(AnalysisCancelled):
            analyze_workspace(tmp_path, cancellation_token=token, config=AnalyzerConfig())

    def test_uncancelled_token_completes(self, tmp_path):
        _touch(tmp_path, "a.ts", "import './b';\n")
        _touch(tmp_path, "b.ts", "")
        token = _CancelAfter(100)
        graph = analyze_workspace(tmp_path, cancellation_token=token, config=AnalyzerConfig())
        assert len(graph.nodes) == 2
        # start, after collection, once per file, after analysis, before cycles
        assert token.calls == 6

    def test_cancelled_is_not_a_generic_failure(self):
        assert not issubclass(AnalysisCancelled, (OSError, ValueError, RuntimeError))
