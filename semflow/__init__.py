"""semflow: enrich raw program flow graphs into semantic flow graphs.

Raw flow graphs record a program's function calls and data flow together
with optional references into an ontology. Enrichment resolves those
references, expands annotated calls into ontology morphisms, and collapses
the remaining unannotated plumbing.
"""

__version__ = "0.1.0"
