"""Namespace contexts for XPath queries.

A :class:`NamespaceContext` maps prefixes to namespace URIs.  The empty
prefix ``""`` stands for the default namespace, which XPath 1.0 has no
syntax for; queries refer to it with an empty prefix as in ``//:name``.
"""

from lxml import etree

__all__ = ['NamespaceContext']


class NamespaceContext(object):
    """Mutable prefix to namespace URI mapping.

    Contexts are not connected to a document.  Entries can be added or
    replaced at any time, also with prefixes or URIs that the document
    does not use, e.g. to define aliases::

        >>> context = NamespaceContext({'': 'urn:default'})
        >>> context.add_namespace('alias', 'urn:default')
        >>> sorted(context.get_prefixes('urn:default'))
        ['', 'alias']
    """
    def __init__(self, mapping=None):
        self._mapping = {}
        if mapping:
            for prefix, uri in mapping.items():
                self.add_namespace(prefix, uri)

    @classmethod
    def build(cls, document):
        """Collect the namespace declarations of a document.

        Elements are visited in document order.  When a prefix is declared
        more than once, the last declaration wins, also if it repeats a
        binding of an ancestor.  Declarations that only bind the name of
        an element created with an explicit namespace URI are skipped.
        """
        context = cls()
        pending = []
        for event, value in etree.iterwalk(
                document.getroot(), events=('start-ns', 'start')):
            if event == 'start-ns':
                pending.append(value)
                continue
            for prefix, uri in pending:
                if not document.is_implicit(value, prefix):
                    context.add_namespace(prefix, uri)
            del pending[:]
        return context

    def add_namespace(self, prefix, uri):
        if prefix is None:
            prefix = ''
        self._mapping[prefix] = uri

    def get_namespace_uri(self, prefix):
        if prefix is None:
            prefix = ''
        return self._mapping.get(prefix)

    def get_prefix(self, uri):
        for prefix in self.get_prefixes(uri):
            return prefix
        return None

    def get_prefixes(self, uri):
        return [prefix for prefix, ns_uri in self._mapping.items()
                if ns_uri == uri]

    def copy(self):
        return self.__class__(self._mapping)

    def items(self):
        return self._mapping.items()

    def __getitem__(self, prefix):
        return self._mapping[prefix]

    def __contains__(self, prefix):
        return prefix in self._mapping

    def __iter__(self):
        return iter(self._mapping)

    def __len__(self):
        return len(self._mapping)

    def __eq__(self, other):
        if isinstance(other, NamespaceContext):
            return self._mapping == other._mapping
        if isinstance(other, dict):
            return self._mapping == other
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self._mapping)
