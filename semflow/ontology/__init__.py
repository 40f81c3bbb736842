"""Ontology side of enrichment: expressions, annotations, and resolvers.

Annotations can be loaded from a YAML document (see
``semflow.ontology.loader``) or supplied by any object implementing the
``AnnotationResolver`` protocol.
"""
