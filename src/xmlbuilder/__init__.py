# this is a package

"""Build, modify and query XML documents with a chainable cursor API
on top of lxml.
"""

__version__ = "1.2"

from xmlbuilder.builder import XMLBuilder
from xmlbuilder.document import Document, make_parser
from xmlbuilder.errors import (
    XMLBuilderError, ParseError, ConfigurationError, QueryError,
    InvalidArgumentError, InvalidStateError)
from xmlbuilder.namespaces import NamespaceContext
from xmlbuilder.xpath import STRING, NUMBER, BOOLEAN, NODESET, NODE
from xmlbuilder.output import (
    METHOD, INDENT, INDENT_AMOUNT, OMIT_XML_DECLARATION,
    ENCODING, VERSION, STANDALONE)
