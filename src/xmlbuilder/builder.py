"""
Cursor style XML document builder.

An :class:`XMLBuilder` points to one element of a document.  Methods that
add content return a builder, which allows documents to be written as a
chain of calls that mirrors the structure of the result::

    >>> from xmlbuilder import XMLBuilder
    >>> builder = (XMLBuilder.create('Projects')
    ...     .e('java-xmlbuilder')
    ...         .a('language', 'Java')
    ...         .e('Location').a('type', 'URL')
    ...             .t('http://code.google.com/p/java-xmlbuilder/')
    ...         .up()
    ...     .up()
    ...     .e('JetS3t').a('language', 'Java'))
    >>> print(builder.as_string())
    <Projects><java-xmlbuilder language="Java"><Location type="URL">http://code.google.com/p/java-xmlbuilder/</Location></java-xmlbuilder><JetS3t language="Java"/></Projects>

Builders are immutable: ``element()`` returns a new builder positioned at
the new child, while ``attribute()``, ``text()`` and the other content
methods return a builder for the same element.  Any number of builders
can point into the same document, e.g. one per parent element when
adding children in a loop.

Elements are looked up with XPath, relative to the builder's element::

    >>> builder.xpath_find('//Location').get_text()
    'http://code.google.com/p/java-xmlbuilder/'
"""

from xmlbuilder import css as _css
from xmlbuilder import output as _output
from xmlbuilder import tree as _tree
from xmlbuilder import xpath as _xpath
from xmlbuilder.document import Document
from xmlbuilder.errors import InvalidArgumentError
from xmlbuilder.namespaces import NamespaceContext

__all__ = ['XMLBuilder']

_DEFAULT_STRING_PROPERTIES = {_output.OMIT_XML_DECLARATION: 'yes'}


class XMLBuilder(object):
    """A position in an XML document.

    Use :meth:`create` or :meth:`parse` to get a builder for the root
    element of a new document.
    """
    __slots__ = ('_document', '_element')

    def __init__(self, document, element):
        self._document = document
        self._element = element

    @classmethod
    def create(cls, name, namespace_uri=None):
        """Create a new document with a root element ``name``.
        """
        document = Document.create(name, namespace_uri)
        return cls(document, document.getroot())

    @classmethod
    def parse(cls, source, parser=None):
        """Parse a document and return a builder for its root element.

        ``source`` is either XML text, bytes, a file-like object or a file
        system path.  Raises ParseError for malformed documents.
        """
        document = Document.parse(source, parser)
        return cls(document, document.getroot())

    def _at(self, element):
        return self.__class__(self._document, element)

    # accessors

    def get_document(self):
        return self._document

    def get_element(self):
        return self._element

    def get_name(self):
        """The qualified name of the current element.
        """
        return _tree.node_name(self._element)

    def get_text(self):
        """The text content of the current element and its descendants.
        """
        return _tree.text_content(self._element)

    # navigation

    def up(self, steps=1):
        """Return a builder for an ancestor of the current element.

        Stops at the root element when there are fewer than ``steps``
        ancestors.
        """
        if steps < 0:
            raise InvalidArgumentError(
                "Cannot move up a negative number of steps: %r" % steps)
        element = self._element
        if _tree.is_document(element):
            return self
        for _ in range(steps):
            parent = element.getparent()
            if parent is None:
                break
            element = parent
        return self._at(element)

    def root(self):
        return self._at(self._document.getroot())

    def document(self):
        """Return a builder for the document node that holds the root
        element.

        Processing instructions and comments added there are placed
        after the root element.  Any other content raises
        InvalidStateError.
        """
        return self._at(self._document.getroottree())

    # content

    def element(self, name, namespace_uri=None):
        """Add a child element and return a builder for it.

        Without a ``namespace_uri``, the element inherits the namespace
        bound to the prefix of ``name``, or the default namespace.
        """
        element = _tree.append_element(self._element, name, namespace_uri)
        self._document.mark_implicit(element)
        return self._at(element)

    elem = e = element

    def element_before(self, name, namespace_uri=None):
        """Insert an element right before the current one and return a
        builder for it.

        Raises InvalidStateError for the root element.
        """
        element = _tree.insert_element_before(
            self._element, name, namespace_uri)
        self._document.mark_implicit(element)
        return self._at(element)

    def attribute(self, name, value):
        _tree.set_attribute(self._element, name, value)
        return self

    attr = a = attribute

    def namespace(self, prefix, namespace_uri):
        """Declare a namespace prefix on the current element.

        An empty prefix declares the default namespace.
        """
        _tree.declare_namespace(self._element, prefix, namespace_uri)
        self._document.mark_declared(self._element, prefix)
        return self

    ns = namespace

    def namespaces(self, mapping):
        for prefix, namespace_uri in mapping.items():
            self.namespace(prefix, namespace_uri)
        return self

    def text(self, value, replace=False):
        """Add text after the existing content of the current element.

        With ``replace=True`` the text children of the element are
        removed first.
        """
        _tree.append_text(self._element, value, replace)
        return self

    t = text

    def cdata(self, data):
        """Add a CDATA section.  Byte strings are base64 encoded.
        """
        _tree.append_cdata(self._element, data)
        return self

    data = d = cdata

    def comment(self, text):
        _tree.append_comment(self._element, text)
        return self

    cmnt = c = comment

    def instruction(self, target, data=None):
        """Append a processing instruction to the current element, or
        after the root element for the document node.
        """
        _tree.append_instruction(self._element, target, data)
        return self

    inst = i = instruction

    def insert_instruction(self, target, data=None):
        """Insert a processing instruction at the start of the document,
        before the root element.
        """
        _tree.insert_instruction(self._element, target, data)
        return self

    def reference(self, name):
        """Append an entity reference ``&name;``.
        """
        _tree.append_reference(self._element, name)
        return self

    ref = r = reference

    def import_builder(self, builder):
        """Append a copy of the whole document of another builder to the
        current element.  The position of this builder does not change.

        Raises InvalidStateError if the current element contains text.
        """
        source = builder.root().get_element()
        clone = _tree.import_subtree(self._element, source)
        self._document.copy_marks(builder.get_document(), source, clone)
        return self

    def strip_whitespace_only_text_nodes(self):
        """Remove whitespace-only text from the whole document.
        """
        _tree.strip_whitespace_text(self._document.getroot())
        return self

    # queries

    def build_document_namespace_context(self):
        return NamespaceContext.build(self._document)

    def xpath_find(self, expression, namespace_context=None):
        """Return a builder for the first element matching an XPath
        expression.  Relative expressions start at the current element.

        Raises QueryError if the expression does not resolve to an
        element.
        """
        return self._at(_xpath.find_element(
            self._element, expression, namespace_context))

    def xpath_query(self, expression, result_type, namespace_context=None):
        """Evaluate an XPath expression and return the raw result as one
        of the types STRING, NUMBER, BOOLEAN, NODESET or NODE.
        """
        return _xpath.query(
            self._element, expression, result_type, namespace_context)

    def css_find(self, selector, namespace_context=None):
        """Return a builder for the first element matching a CSS
        selector, searched from the current element.
        """
        return self.xpath_find(_css.css_to_xpath(selector), namespace_context)

    # output

    def as_string(self, properties=None):
        """Serialise the whole document, independent of the position of
        this builder.  The XML declaration is omitted unless output
        properties are passed.
        """
        if properties is None:
            properties = _DEFAULT_STRING_PROPERTIES
        return _output.serialize_document(self._document, properties)

    def element_as_string(self, properties=None):
        """Serialise the current element and its descendants.
        """
        if properties is None:
            properties = _DEFAULT_STRING_PROPERTIES
        return _output.serialize_element(self._element, properties)

    def to_writer(self, writer, properties=None, whole_document=True):
        """Write the document, or only the current element, to a text
        stream.
        """
        if whole_document:
            markup = _output.serialize_document(self._document, properties)
        else:
            markup = _output.serialize_element(self._element, properties)
        writer.write(markup)
        return self

    def __eq__(self, other):
        if not isinstance(other, XMLBuilder):
            return NotImplemented
        return (self._document is other._document
                and self._element is other._element)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((id(self._document), id(self._element)))

    def __repr__(self):
        return '<%s at %r>' % (self.__class__.__name__, self.get_name())
