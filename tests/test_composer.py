"""Tests for the RDFS composer: ordering, lookup, placeholders, and output."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import Graph
from rdflib.namespace import RDF, RDFS

from cimrdfs.common import extract_common_attributes
from cimrdfs.composer import (
    CIMS_ENUM,
    MissingDocumentationReport,
    compose_rdfs,
    placeholder,
    schema_elements,
    write_document,
)
from cimrdfs.descriptions import parse_descriptions
from cimrdfs.errors import OutputWriteError
from cimrdfs.types import AttributeCatalog, ElementRole, EnumRegistry, SchemaElement


HEADER = (
    '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" '
    'xmlns:rdfs="http://www.w3.org/2000/01/rdf-schema#" xml:base="http://iec.ch/TC57/CIM100">'
)


def _block(name: str, comment: str) -> str:
    return (
        f'  <rdf:Description rdf:about="#{name}">\n'
        f'    <rdfs:comment>{comment}</rdfs:comment>\n'
        f'  </rdf:Description>'
    )


def _catalog() -> AttributeCatalog:
    return AttributeCatalog(
        attributes={
            "Breaker": frozenset({"status", "ratedCurrent"}),
            "Switch": frozenset({"status", "Switch.normalOpen"}),
        },
        enums=EnumRegistry({"status": frozenset({"OPEN_CODE", "CLOSED_CODE"})}),
    )


def _descriptions(*blocks: str):
    text = HEADER + "\n" + "\n".join(blocks) + "\n</rdf:RDF>\n"
    return parse_descriptions(text.splitlines(keepends=True))


class TestSchemaElements:
    def test_emission_order(self):
        catalog = _catalog()
        elements = schema_elements(catalog, extract_common_attributes(catalog))
        assert [e.name for e in elements] == [
            "Breaker", "Switch",
            "Breaker.ratedCurrent", "Switch.normalOpen", "status",
            "CLOSED_CODE", "OPEN_CODE",
        ]

    def test_roles_and_domains(self):
        catalog = _catalog()
        elements = {e.name: e for e in schema_elements(catalog, extract_common_attributes(catalog))}
        assert elements["Breaker"].role == ElementRole.CLASS
        assert elements["status"].role == ElementRole.ATTRIBUTE
        assert elements["status"].domain is None
        assert elements["Breaker.ratedCurrent"].domain == "Breaker"
        assert elements["Breaker.ratedCurrent"].fallback == "ratedCurrent"
        assert elements["Switch.normalOpen"].fallback is None
        assert elements["OPEN_CODE"].role == ElementRole.ENUM_VALUE

    def test_name_emitted_once_across_roles(self):
        catalog = AttributeCatalog(
            attributes={"Breaker": frozenset({"state"}), "Switch": frozenset({"state"})},
            enums=EnumRegistry({"state": frozenset({"Breaker"})}),
        )
        names = [e.name for e in schema_elements(catalog, extract_common_attributes(catalog))]
        assert names.count("Breaker") == 1


class TestPlaceholder:
    def test_class_placeholder(self):
        text = placeholder(SchemaElement("Breaker", ElementRole.CLASS))
        assert 'rdf:about="#Breaker"' in text
        assert str(RDFS.Class) in text
        assert "rdfs:comment" not in text

    def test_attribute_placeholder_has_domain(self):
        text = placeholder(SchemaElement("Breaker.ratedCurrent", ElementRole.ATTRIBUTE, domain="Breaker"))
        assert '<rdfs:label xml:lang="en">ratedCurrent</rdfs:label>' in text
        assert str(RDF.Property) in text
        assert '<rdfs:domain rdf:resource="#Breaker"/>' in text

    def test_enum_placeholder(self):
        text = placeholder(SchemaElement("OPEN_CODE", ElementRole.ENUM_VALUE))
        assert CIMS_ENUM in text

    def test_names_are_escaped(self):
        text = placeholder(SchemaElement('A&"B', ElementRole.CLASS))
        assert 'rdf:about="#A&amp;&quot;B"' in text


class TestCompose:
    def test_authored_fragment_verbatim(self):
        breaker = _block("Breaker", "Authored   text\n\n   with gaps")
        document = compose_rdfs(_descriptions(breaker), _catalog(), extract_common_attributes(_catalog()))
        assert breaker in document.text

    def test_missing_descriptions_get_placeholders(self):
        catalog = _catalog()
        document = compose_rdfs(_descriptions(_block("Breaker", "x")), catalog, extract_common_attributes(catalog))
        assert "Breaker" not in document.missing
        assert "Breaker.ratedCurrent" in document.missing
        assert 'rdf:about="#Switch"' in document.text
        assert len(document.missing) == len(document.elements) - 1

    def test_class_specific_falls_back_to_bare_name(self):
        catalog = _catalog()
        rated = _block("ratedCurrent", "Rated current.")
        document = compose_rdfs(_descriptions(rated), catalog, extract_common_attributes(catalog))
        assert rated in document.text
        assert "Breaker.ratedCurrent" not in document.missing

    def test_header_first_and_closed(self):
        catalog = _catalog()
        document = compose_rdfs(_descriptions(), catalog, extract_common_attributes(catalog))
        assert document.text.startswith(HEADER + "\n")
        assert document.text.endswith("</rdf:RDF>\n")

    def test_output_is_well_formed_rdf(self):
        catalog = _catalog()
        document = compose_rdfs(_descriptions(_block("status", "s")), catalog, extract_common_attributes(catalog))
        graph = Graph()
        graph.parse(data=document.text, format="xml")
        subjects = {str(s).rsplit("#", 1)[-1] for s in graph.subjects()}
        assert subjects == {e.name for e in document.elements}

    def test_each_element_once(self):
        catalog = _catalog()
        document = compose_rdfs(_descriptions(), catalog, extract_common_attributes(catalog))
        for element in document.elements:
            assert document.text.count(f'rdf:about="#{element.name}"') == 1

    def test_unmatched_descriptions_dropped_by_default(self):
        catalog = _catalog()
        extra = _block("PowerTransformer", "Not discovered.")
        document = compose_rdfs(_descriptions(extra), catalog, extract_common_attributes(catalog))
        assert "PowerTransformer" not in document.text

    def test_unmatched_descriptions_appended_when_requested(self):
        catalog = _catalog()
        extra = _block("PowerTransformer", "Not discovered.")
        document = compose_rdfs(
            _descriptions(extra), catalog, extract_common_attributes(catalog), include_unmatched=True,
        )
        assert document.text.rstrip().endswith(extra + "\n</rdf:RDF>")

    def test_deterministic(self):
        catalog = _catalog()
        first = compose_rdfs(_descriptions(), catalog, extract_common_attributes(catalog))
        second = compose_rdfs(_descriptions(), catalog, extract_common_attributes(catalog))
        assert first.text == second.text


class TestOutput:
    def test_write_document(self, tmp_path):
        catalog = _catalog()
        document = compose_rdfs(_descriptions(), catalog, extract_common_attributes(catalog))
        target = write_document(document, tmp_path / "out" / "GeneratedCIMRDFS.xml")
        assert target.read_text(encoding="utf-8") == document.text
        assert [p.name for p in target.parent.iterdir()] == ["GeneratedCIMRDFS.xml"]

    def test_write_failure_names_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        catalog = _catalog()
        document = compose_rdfs(_descriptions(), catalog, extract_common_attributes(catalog))
        with pytest.raises(OutputWriteError) as info:
            write_document(document, blocker / "out.xml")
        assert str(blocker / "out.xml") in str(info.value)


class TestMissingReport:
    def test_format_lists_elements(self):
        report = MissingDocumentationReport()
        report.add(SchemaElement("ratedCurrent", ElementRole.ATTRIBUTE))
        text = report.format()
        assert "1 element(s)" in text
        assert "attribute" in text and "ratedCurrent" in text

    def test_write(self, tmp_path):
        report = MissingDocumentationReport()
        report.add(SchemaElement("OPEN_CODE", ElementRole.ENUM_VALUE))
        report.write(tmp_path / "missing.txt")
        assert "OPEN_CODE" in (tmp_path / "missing.txt").read_text(encoding="utf-8")
