"""Tests for source selection, the pipeline context, and the CLI."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from cimrdfs.cli import main
from cimrdfs.errors import IngestionError, SelectionError
from cimrdfs.pipeline import PipelineConfig, build_context, run_pipeline, select_sources
from cimrdfs.store import StoreGateway

from case_studies.switchgear.dataset import DESCRIPTIONS, INSTANCES


SECOND_SOURCE = """<?xml version="1.0" encoding="utf-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" xmlns:cim="http://iec.ch/TC57/CIM100#">
  <cim:Fuse rdf:about="http://example.org/feeder#FU1">
    <cim:IdentifiedObject.name>FU1</cim:IdentifiedObject.name>
  </cim:Fuse>
</rdf:RDF>
"""


MULTI_TYPED_SOURCE = """<?xml version="1.0" encoding="utf-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" xmlns:cim="http://iec.ch/TC57/CIM100#">
  <cim:Switch rdf:about="http://example.org/feeder#X1">
    <rdf:type rdf:resource="http://iec.ch/TC57/CIM100#Breaker"/>
  </cim:Switch>
</rdf:RDF>
"""


def _config(tmp_path, sources=None, **kwargs) -> PipelineConfig:
    return PipelineConfig(
        sources=sources or [INSTANCES],
        descriptions=DESCRIPTIONS,
        output=tmp_path / "GeneratedCIMRDFS.xml",
        **kwargs,
    )


class TestSelectSources:
    def test_all(self):
        assert len(select_sources(["a.xml", "b.xml"], "all")) == 2

    def test_index_is_one_based(self):
        assert [p.name for p in select_sources(["a.xml", "b.xml"], "2")] == ["b.xml"]

    @pytest.mark.parametrize("selection", ["0", "3", "first", "-1", ""])
    def test_invalid_selection(self, selection):
        with pytest.raises(SelectionError):
            select_sources(["a.xml", "b.xml"], selection)

    def test_no_sources(self):
        with pytest.raises(SelectionError):
            select_sources([], "all")


class TestPipeline:
    def test_context_stages(self, tmp_path):
        with StoreGateway() as store:
            context = build_context(_config(tmp_path), store)
        assert list(context.index) == ["Breaker", "Switch", "Terminal"]
        assert "status" in context.catalog.enums
        assert "status" in context.common.common
        assert "PowerTransformer" in context.descriptions

    def test_build_context_clears_previous_content(self, tmp_path):
        extra = tmp_path / "fuse.xml"
        extra.write_text(SECOND_SOURCE, encoding="utf-8")
        with StoreGateway() as store:
            store.load([extra])
            context = build_context(_config(tmp_path), store)
        assert "Fuse" not in list(context.index)

    def test_combined_sources(self, tmp_path):
        extra = tmp_path / "fuse.xml"
        extra.write_text(SECOND_SOURCE, encoding="utf-8")
        result = run_pipeline(_config(tmp_path, sources=[INSTANCES, extra]))
        assert "Fuse" in result.context.common.class_types
        assert "Fuse" in result.document.missing

    def test_multiply_typed_class_still_emitted(self, tmp_path):
        source = tmp_path / "typed.xml"
        source.write_text(MULTI_TYPED_SOURCE, encoding="utf-8")
        result = run_pipeline(_config(tmp_path, sources=[source]))
        names = [e.name for e in result.document.elements]
        assert names[:2] == ["Breaker", "Switch"]
        assert 'rdf:about="#Switch"' in result.output.read_text(encoding="utf-8")

    def test_byte_identical_runs(self, tmp_path):
        first = run_pipeline(_config(tmp_path))
        first_bytes = first.output.read_bytes()
        second = run_pipeline(_config(tmp_path))
        assert second.output.read_bytes() == first_bytes

    def test_missing_report_file(self, tmp_path):
        report = tmp_path / "missing.txt"
        run_pipeline(_config(tmp_path, missing_report=report))
        text = report.read_text(encoding="utf-8")
        assert "Breaker.ratedCurrent" in text
        assert "Switch.ratedCurrent" in text

    def test_unreadable_source_aborts_before_output(self, tmp_path):
        config = _config(tmp_path, sources=[tmp_path / "absent.xml"])
        with pytest.raises(IngestionError):
            run_pipeline(config)
        assert not config.output.exists()


class TestCli:
    def test_generates_document(self, tmp_path, capsys):
        output = tmp_path / "out.xml"
        code = main([str(INSTANCES), "-d", str(DESCRIPTIONS), "-o", str(output)])
        assert code == 0
        assert output.exists()
        captured = capsys.readouterr()
        assert "RDFS file is generated" in captured.out
        assert "Breaker.ratedCurrent" in captured.err

    def test_invalid_selection_exits(self, tmp_path, capsys):
        output = tmp_path / "out.xml"
        with pytest.raises(SystemExit) as info:
            main([str(INSTANCES), "-d", str(DESCRIPTIONS), "-o", str(output), "--select", "5"])
        assert info.value.code == 2
        assert "Invalid selection" in capsys.readouterr().err
        assert not output.exists()

    def test_include_unmatched_flag(self, tmp_path):
        output = tmp_path / "out.xml"
        main([str(INSTANCES), "-d", str(DESCRIPTIONS), "-o", str(output), "--include-unmatched"])
        assert 'rdf:about="#PowerTransformer"' in output.read_text(encoding="utf-8")
