"""Serialisation of documents and elements.

Output is configured with a dict of output properties, using the names
known from XSLT's ``xsl:output``::

    {METHOD: 'xml', INDENT: 'yes', INDENT_AMOUNT: 2,
     OMIT_XML_DECLARATION: 'no', ENCODING: 'UTF-8'}

Flags accept ``'yes'``/``'no'`` as well as booleans.  The markup itself
is produced by lxml, the XML declaration is written here so that the
version and standalone properties are always honoured.
"""

import codecs
import copy
import logging

from lxml import etree

from xmlbuilder.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    'METHOD', 'INDENT', 'INDENT_AMOUNT', 'OMIT_XML_DECLARATION',
    'ENCODING', 'VERSION', 'STANDALONE',
    'forward_standalone', 'serialize_document', 'serialize_element',
]

METHOD = 'method'
INDENT = 'indent'
INDENT_AMOUNT = 'indent-amount'
OMIT_XML_DECLARATION = 'omit-xml-declaration'
ENCODING = 'encoding'
VERSION = 'version'
STANDALONE = 'standalone'

_KNOWN_PROPERTIES = frozenset([
    METHOD, INDENT, INDENT_AMOUNT, OMIT_XML_DECLARATION,
    ENCODING, VERSION, STANDALONE,
])
_METHODS = ('xml', 'html', 'text')
_TRUE = ('yes', 'true', '1')
_FALSE = ('no', 'false', '0')

DEFAULT_INDENT_AMOUNT = 2


def _flag(properties, key, default=None):
    value = properties.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value = str(value).strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(
        "Invalid value %r for output property %r, expected yes or no"
        % (properties[key], key))


class _Settings(object):
    # validated form of an output property dict
    def __init__(self, properties):
        properties = dict(properties or ())
        unknown = set(properties) - _KNOWN_PROPERTIES
        if unknown:
            raise ConfigurationError(
                "Unknown output properties: %s" % ', '.join(sorted(unknown)))

        self.method = str(properties.get(METHOD) or 'xml').lower()
        if self.method not in _METHODS:
            raise ConfigurationError(
                "Unsupported output method %r" % properties[METHOD])

        self.encoding = str(properties.get(ENCODING) or 'UTF-8')
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ConfigurationError(
                "Unknown output encoding %r" % self.encoding) from e

        self.version = str(properties.get(VERSION) or '1.0')
        self.omit_declaration = _flag(properties, OMIT_XML_DECLARATION, False)
        self.standalone = _flag(properties, STANDALONE)
        self.indent = _flag(properties, INDENT, False)

        amount = properties.get(INDENT_AMOUNT, DEFAULT_INDENT_AMOUNT)
        try:
            self.indent_amount = int(amount)
        except (TypeError, ValueError):
            self.indent_amount = -1
        if self.indent_amount < 0:
            raise ConfigurationError("Invalid indent amount %r" % amount)

    def declaration(self):
        if self.method != 'xml' or self.omit_declaration:
            return ''
        declaration = '<?xml version="%s" encoding="%s"' % (
            self.version, self.encoding)
        if self.standalone is not None:
            declaration += ' standalone="%s"' % (
                'yes' if self.standalone else 'no')
        declaration += '?>'
        if self.indent:
            declaration += '\n'
        return declaration


def forward_standalone(properties, document):
    """Return output properties that carry the standalone flag of the
    document, unless the properties set it themselves.
    """
    properties = dict(properties or ())
    if document.standalone and properties.get(STANDALONE) is None:
        properties[STANDALONE] = 'yes'
    return properties


def _tostring(node, settings):
    if settings.indent:
        node = copy.deepcopy(node)
        if isinstance(node, etree._Element):
            node.tail = None
        etree.indent(node, space=' ' * settings.indent_amount)
    options = dict(method=settings.method, encoding=settings.encoding,
                   xml_declaration=False)
    if isinstance(node, etree._Element):
        options['with_tail'] = False
    # characters outside of the encoding become character references
    markup = etree.tostring(node, **options).decode(settings.encoding)
    return settings.declaration() + markup


def serialize_document(document, properties=None):
    """Serialise a whole document, including the processing instructions
    and comments outside of the root element.
    """
    settings = _Settings(forward_standalone(properties, document))
    logger.debug("serialising document %r as %s", document, settings.method)
    return _tostring(document.getroottree(), settings)


def serialize_element(element, properties=None):
    """Serialise an element and its descendants.
    """
    settings = _Settings(properties)
    return _tostring(element, settings)
