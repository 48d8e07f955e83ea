"""
Filter definition corpus — every definition, loaded once at startup.

The corpus is immutable after construction and safe to share between request
workers without locking. Its fingerprint changes whenever any definition
source changes, and feeds every list ETag.
"""
import hashlib
import logging
import os
from types import MappingProxyType

from filterlists.errors import MalformedDefinition, UnknownFilter
from filterlists.filters.loader import parse_definition
from filterlists.filters.templating import compile_template

logger = logging.getLogger('filters.corpus')

DEFINITION_SUFFIX = '.yaml'


class FilterCorpus:
    """Read-only registry of filter definitions and their compiled templates."""

    def __init__(self, definitions=()):
        by_name = {}
        for definition in definitions:
            if definition.name in by_name:
                raise MalformedDefinition(definition.name, 'duplicate filter name')
            by_name[definition.name] = definition

        ordered = dict(sorted(by_name.items()))
        self._definitions = MappingProxyType(ordered)
        self._templates = MappingProxyType({
            name: compile_template(definition.template) for name, definition in ordered.items()
        })
        self._fingerprint = self._compute_fingerprint(ordered)

    @staticmethod
    def _compute_fingerprint(definitions):
        digest = hashlib.sha256()
        for name, definition in definitions.items():
            digest.update(name.encode('utf-8'))
            digest.update(b'\0')
            digest.update(definition.fingerprint.encode('ascii'))
            digest.update(b'\n')
        return digest.hexdigest()[:16]

    @classmethod
    def load(cls, directory):
        """
        Load every *.yaml definition in directory (sorted by file name).

        Fails fast: the first malformed source aborts the whole load.
        """
        definitions = []
        for filename in sorted(os.listdir(directory)):
            if not filename.endswith(DEFINITION_SUFFIX):
                continue
            name = filename[:-len(DEFINITION_SUFFIX)]
            with open(os.path.join(directory, filename), 'rb') as f:
                definitions.append(parse_definition(name, f))

        corpus = cls(definitions)
        logger.info("Loaded %d filter definitions from %s (fingerprint=%s)",
                    len(corpus), directory, corpus.fingerprint)
        return corpus

    @property
    def fingerprint(self):
        return self._fingerprint

    def get(self, name):
        return self._definitions.get(name)

    def require(self, name):
        """Return the definition for name, or raise UnknownFilter."""
        definition = self._definitions.get(name)
        if definition is None:
            raise UnknownFilter(name)
        return definition

    def template_for(self, name):
        template = self._templates.get(name)
        if template is None:
            raise UnknownFilter(name)
        return template

    def names(self):
        return list(self._definitions)

    def __contains__(self, name):
        return name in self._definitions

    def __iter__(self):
        return iter(self._definitions.values())

    def __len__(self):
        return len(self._definitions)
