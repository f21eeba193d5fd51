"""cimrdfs — RDFS schema inference for CIM RDF instance data.

Reads CIM-flavoured RDF/XML instance documents, infers the schema they use and
merges it with a hand-written RDFS description document:

- Store Gateway (cimrdfs.store): rdflib graph, bulk load and SPARQL patterns
- Class-Instance Indexer (cimrdfs.indexer): class types and their instances
- Attribute Catalog Builder (cimrdfs.catalog): attributes per class, enums
- Common-Attribute Extractor (cimrdfs.common): shared vs class-specific names
- Description Repository (cimrdfs.descriptions): authored fragments by name
- RDFS Composer (cimrdfs.composer): merge, placeholders, deterministic output

cimrdfs.pipeline runs the stages in order; cimrdfs.cli is the command line.
"""

__version__ = "0.1.0"
