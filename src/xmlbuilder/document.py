"""The document that builders work on.

A :class:`Document` owns an lxml ``_ElementTree``.  Every builder keeps a
reference to the document of the element it points to, so that whole
document operations (serialisation, namespace scanning, instructions
outside of the root element) work from any position in the tree.
"""

import logging
import os
import re

from lxml import etree

from xmlbuilder import tree as _tree
from xmlbuilder.errors import (
    ConfigurationError, InvalidArgumentError, ParseError)

logger = logging.getLogger(__name__)

__all__ = ['Document', 'make_parser']

_declared_encoding = re.compile(
    r'^\s*<\?xml[^>]*?encoding\s*=\s*["\']([A-Za-z][A-Za-z0-9._-]*)["\']').match


def make_parser(**options):
    """Create the lxml parser used for reading documents.

    CDATA sections are kept by default so that they survive a parse and
    serialise cycle.  Any other keyword is passed to ``etree.XMLParser``.
    """
    options.setdefault('strip_cdata', False)
    options.setdefault('no_network', True)
    try:
        return etree.XMLParser(**options)
    except (TypeError, ValueError) as e:
        raise ConfigurationError("Invalid parser configuration: %s" % e) from e


def _encode_text(text):
    # lxml rejects unicode strings that carry an encoding declaration
    match = _declared_encoding(text)
    if match is None:
        return text
    encoding = match.group(1)
    try:
        return text.encode(encoding, 'xmlcharrefreplace')
    except LookupError as e:
        raise ParseError("Unknown encoding %r in XML declaration" % encoding) from e


class Document(object):
    """An XML document with exactly one root element.
    """
    def __init__(self, tree, standalone=None):
        self._tree = tree
        if standalone is None:
            standalone = tree.docinfo.standalone
        #: marks the document as standalone in serialised output
        self.standalone = bool(standalone)
        # (element, prefix) of declarations that lxml wrote to bind the
        # name of a new element, as opposed to declared ones
        self._implicit = set()

    @classmethod
    def create(cls, name, namespace_uri=None):
        root = _tree.create_root(name, namespace_uri)
        return cls(root.getroottree())

    @classmethod
    def parse(cls, source, parser=None):
        """Parse a document from XML text, bytes, a file-like object or a
        file system path.
        """
        if parser is None:
            parser = make_parser()
        try:
            if isinstance(source, str):
                root = etree.fromstring(_encode_text(source), parser)
                tree = root.getroottree()
            elif isinstance(source, (bytes, bytearray)):
                root = etree.fromstring(bytes(source), parser)
                tree = root.getroottree()
            elif hasattr(source, 'read'):
                tree = etree.parse(source, parser)
            elif isinstance(source, os.PathLike):
                tree = etree.parse(os.fspath(source), parser)
            else:
                raise InvalidArgumentError(
                    "Cannot parse a document from %s" % type(source).__name__)
        except etree.XMLSyntaxError as e:
            raise ParseError(str(e), e.lineno, e.offset) from e
        if tree.getroot() is None:
            raise ParseError("Document has no root element")
        logger.debug("parsed document with root element %r",
                     _tree.node_name(tree.getroot()))
        return cls(tree)

    def mark_implicit(self, element):
        """Record the declarations on a new element as implicit.

        They are left out of namespace contexts built for the document.
        """
        for prefix in _tree.own_namespaces(element):
            self._implicit.add((element, prefix))

    def mark_declared(self, element, prefix):
        self._implicit.discard((element, prefix or None))

    def is_implicit(self, element, prefix):
        return (element, prefix or None) in self._implicit

    def copy_marks(self, other, source, clone):
        # clone is a deep copy of source, which belongs to other
        if not other._implicit:
            return
        for original, copied in zip(source.iter(tag=etree.Element),
                                    clone.iter(tag=etree.Element)):
            for prefix in _tree.own_namespaces(copied):
                if other.is_implicit(original, prefix):
                    self._implicit.add((copied, prefix))

    def getroot(self):
        return self._tree.getroot()

    def getroottree(self):
        return self._tree

    @property
    def docinfo(self):
        return self._tree.docinfo

    @property
    def xml_version(self):
        return self._tree.docinfo.xml_version

    @property
    def encoding(self):
        return self._tree.docinfo.encoding

    def __repr__(self):
        return '<%s root=%r at 0x%x>' % (
            self.__class__.__name__, _tree.node_name(self.getroot()), id(self))
