"""Node level operations on lxml element trees.

The builder never touches lxml nodes directly; all structural changes go
through the functions in this module so that argument validation always
happens before the tree is modified.

Character data is stored the lxml way: the text before the first child
of an element is its ``.text``, the text following a child is that
child's ``.tail``.  Each of these slots may hold several text and CDATA
segments, which lxml reports as one string.  A "text child" of an
element is any character data in these slots that is not part of a
CDATA section.

The document node itself is represented by the lxml ``_ElementTree``.  It
only takes processing instructions and comments, which are placed next
to the root element.
"""

import base64
import copy
import logging
import re

from lxml import etree

from xmlbuilder.errors import InvalidArgumentError, InvalidStateError

logger = logging.getLogger(__name__)

__all__ = [
    'split_qname', 'node_name', 'text_content', 'is_document',
    'own_namespaces',
    'create_root', 'append_element', 'insert_element_before',
    'set_attribute', 'declare_namespace',
    'append_text', 'remove_text', 'append_cdata', 'append_comment',
    'append_instruction', 'insert_instruction', 'append_reference',
    'strip_whitespace_text', 'has_text_children', 'import_subtree',
]

_CDATA_START = '<![CDATA['
_CDATA_END = ']]>'
_XML_WHITESPACE = ' \t\r\n'

_is_ncname = re.compile(r'[^\W\d][\w.\-]*\Z').match
_cdata_sections = re.compile(r'<!\[CDATA\[.*?\]\]>', re.S)

# lxml refuses ':' in tag names, but a recovering parser keeps the raw
# qualified name of an element whose prefix is not declared anywhere.
_unbound_parser = etree.XMLParser(recover=True)

# temporary nodes, removed again before any function returns
_PLACEHOLDER_TAG = '{urn:xmlbuilder:placeholder}text'
_ANCHOR_NAME = 'anchor'

DOCUMENT_NODE_NAME = '#document'


def split_qname(name):
    """Split a qualified name into ``(prefix, localname)``.

    The prefix is None for unprefixed names.
    """
    if name is None:
        raise InvalidArgumentError("Illegal null element name")
    prefix, sep, local = name.partition(':')
    if not sep:
        prefix, local = None, name
    if not _is_ncname(local) or (prefix is not None and not _is_ncname(prefix)):
        raise InvalidArgumentError("Invalid XML name %r" % name)
    return prefix, local


def is_document(node):
    return isinstance(node, etree._ElementTree)


def node_name(element):
    """Return the qualified name of an element as it is serialised.
    """
    if is_document(element):
        return DOCUMENT_NODE_NAME
    tag = element.tag
    if not isinstance(tag, str) or not tag.startswith('{'):
        return tag
    local = tag.split('}', 1)[1]
    if element.prefix:
        return '%s:%s' % (element.prefix, local)
    return local


def text_content(element):
    """Return the string-value of an element: all descendant text,
    without comments and processing instructions.
    """
    return str(element.xpath('string()'))


def _require_element(node):
    if is_document(node):
        raise InvalidStateError(
            "The document node only takes processing instructions and "
            "comments, add content to the root element %r instead"
            % node_name(node.getroot()))


def own_namespaces(element):
    """Return the namespace declarations written on ``element`` itself.

    Unlike ``element.nsmap``, bindings inherited from the ancestors are
    left out, while a declaration that repeats an inherited binding is
    included.  The default namespace has the prefix None.
    """
    declared = {}
    for event, value in etree.iterwalk(element, events=('start-ns', 'start')):
        if event == 'start':
            break
        prefix, uri = value
        declared[prefix or None] = uri
    return declared


def _resolve_namespace(lookup_scope, declare_scope, prefix, namespace_uri):
    # Returns the namespace of the new element and the declarations it
    # needs, if any.
    if namespace_uri is None:
        if lookup_scope is None:
            return None, None
        namespace_uri = lookup_scope.nsmap.get(prefix)
        if namespace_uri is None:
            return None, None
    in_scope = declare_scope.nsmap if declare_scope is not None else {}
    if in_scope.get(prefix) == namespace_uri:
        return namespace_uri, None
    return namespace_uri, {prefix: namespace_uri}


def _make_element(parent, name, namespace_uri, lookup_scope=None):
    prefix, local = split_qname(name)
    if lookup_scope is None:
        lookup_scope = parent
    uri, nsmap = _resolve_namespace(lookup_scope, parent, prefix, namespace_uri)
    if uri is None and prefix is not None:
        element = etree.fromstring('<%s/>' % name, _unbound_parser)
        if parent is not None:
            parent.append(element)
        return element
    tag = local if uri is None else '{%s}%s' % (uri, local)
    if parent is None:
        return etree.Element(tag, nsmap=nsmap)
    return etree.SubElement(parent, tag, nsmap=nsmap)


def create_root(name, namespace_uri=None):
    """Create the root element of a new, otherwise empty document.
    """
    return _make_element(None, name, namespace_uri)


def append_element(parent, name, namespace_uri=None):
    """Append a new element as the last child of ``parent``.

    Without an explicit ``namespace_uri``, the prefix of ``name`` (or the
    default namespace) is looked up in the namespaces in scope at the
    parent.  A prefix that is not declared anywhere is kept as part of the
    element name; it is up to the caller to declare it before the
    document is serialised.  With an explicit ``namespace_uri`` the name
    is kept as given, declaring its prefix (or the default namespace) on
    the new element when the binding is not in scope yet.
    """
    _require_element(parent)
    return _make_element(parent, name, namespace_uri)


def insert_element_before(reference, name, namespace_uri=None):
    """Insert a new element as the preceding sibling of ``reference``.

    lxml adapts the namespaces of moved nodes to their new place: a
    declaration that repeats a namespace URI already bound in scope is
    replaced by that binding, which may change the prefix of the new
    element.
    """
    _require_element(reference)
    parent = reference.getparent()
    if parent is None:
        raise InvalidStateError(
            "Cannot insert an element before the document root element %r"
            % node_name(reference))
    element = _make_element(parent, name, namespace_uri, lookup_scope=reference)
    reference.addprevious(element)
    return element


def set_attribute(element, name, value):
    """Set an attribute, replacing any previous value.

    ``name`` may be a plain name, a ``prefix:name`` using a prefix in
    scope, or ``{namespace}name``.
    """
    _require_element(element)
    if value is None:
        raise InvalidArgumentError("Illegal null attribute value")
    if name is None:
        raise InvalidArgumentError("Illegal null attribute name")
    if not name.startswith('{'):
        prefix, local = split_qname(name)
        if prefix is not None:
            uri = element.nsmap.get(prefix)
            if uri is None:
                raise InvalidArgumentError(
                    "Namespace prefix %r of attribute %r is not declared"
                    % (prefix, name))
            name = '{%s}%s' % (uri, local)
    try:
        element.set(name, value)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(str(e)) from e


def _anchor_declarations(element, released=()):
    # cleanup_namespaces() drops every declaration that no node refers
    # to, so each one that has to stay gets a temporary user
    anchors = []
    for node in list(element.iter(tag=etree.Element)):
        for prefix, uri in own_namespaces(node).items():
            if not uri or (node is element and prefix in released):
                continue
            anchors.append(etree.SubElement(
                node, '{%s}%s' % (uri, _ANCHOR_NAME), nsmap={prefix: uri}))
    return anchors


def _remove_nodes(nodes):
    for node in nodes:
        node.getparent().remove(node)


def declare_namespace(element, prefix, uri):
    """Declare a namespace prefix on ``element``.

    An empty or None prefix declares the default namespace.  Nothing is
    written when the binding is already in scope.  A prefix that the
    element itself binds to another URI is rebound, unless that binding
    is in use.  Raises InvalidStateError for bindings that lxml cannot
    keep on the element.

    The declarations below the element stay in place.  lxml merges those
    that repeat a namespace URI bound further up into that binding.
    """
    _require_element(element)
    if uri is None:
        raise InvalidArgumentError("Illegal null namespace URI")
    if not prefix:
        prefix = None
    elif not _is_ncname(prefix):
        raise InvalidArgumentError("Invalid namespace prefix %r" % prefix)

    if element.nsmap.get(prefix) == uri:
        return
    parent = element.getparent()
    if parent is not None:
        for bound_prefix, bound_uri in parent.nsmap.items():
            if bound_uri == uri and bound_prefix != prefix:
                raise InvalidStateError(
                    "Cannot bind %r to %r on %r, lxml only keeps the "
                    "binding to %r that is already in scope"
                    % (prefix or '', uri, node_name(element), bound_prefix or ''))

    if prefix in own_namespaces(element):
        anchors = _anchor_declarations(element, released=(prefix,))
        try:
            etree.cleanup_namespaces(element)
        finally:
            _remove_nodes(anchors)
        if prefix in own_namespaces(element):
            raise InvalidStateError(
                "Namespace prefix %r is bound to %r on %r and in use"
                % (prefix or '', element.nsmap[prefix], node_name(element)))

    anchors = _anchor_declarations(element)
    try:
        anchors.append(etree.SubElement(
            element, '{%s}%s' % (uri, _ANCHOR_NAME), nsmap={prefix: uri}))
        etree.cleanup_namespaces(element, top_nsmap={prefix: uri})
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e
    finally:
        _remove_nodes(anchors)
    if own_namespaces(element).get(prefix) != uri:
        raise InvalidStateError(
            "lxml did not keep the binding of %r to %r on %r"
            % (prefix or '', uri, node_name(element)))
    logger.debug("declared namespace %r=%r on %r",
                 prefix or '', uri, node_name(element))


def _is_whitespace(text):
    return not text.strip(_XML_WHITESPACE)


def _slot_markup(node, tail=False):
    # lxml merges text and CDATA segments; only the serialiser knows
    bare = etree.tostring(node, encoding='unicode', with_tail=False)
    if tail:
        return etree.tostring(node, encoding='unicode', with_tail=True)[len(bare):]
    start = end = bare.index('>') + 1
    while True:
        end = bare.index('<', end)
        if not bare.startswith(_CDATA_START, end):
            return bare[start:end]
        end = bare.index(_CDATA_END, end) + len(_CDATA_END)


def _slot_kinds(markup):
    # (holds CDATA, holds other character data)
    plain = _cdata_sections.sub('', markup)
    return len(plain) < len(markup), bool(plain)


def _current_slot(element):
    # the markup of the slot that new character data joins, or None
    if len(element):
        last = element[-1]
        return None if last.tail is None else _slot_markup(last, tail=True)
    return None if element.text is None else _slot_markup(element)


def _append_to_slot(element, data):
    # assigning .text or .tail replaces a whole slot; the tail of a
    # stripped placeholder ends up behind the segments already there
    placeholder = etree.SubElement(element, _PLACEHOLDER_TAG)
    placeholder.tail = data
    etree.strip_tags(element, _PLACEHOLDER_TAG)


def remove_text(element):
    """Remove all character data that is a direct child of ``element``.
    """
    element.text = None
    for child in element:
        child.tail = None


def append_text(element, value, replace=False):
    """Add a text segment after the current content of ``element``.

    With ``replace``, all existing text children are removed first.
    """
    _require_element(element)
    if value is None:
        raise InvalidArgumentError("Illegal null text value")
    if replace:
        remove_text(element)

    slot = _current_slot(element)
    if slot is not None and _slot_kinds(slot)[0]:
        _append_to_slot(element, value)
    elif len(element):
        last = element[-1]
        last.tail = (last.tail or '') + value
    else:
        element.text = (element.text or '') + value


def append_cdata(element, data):
    """Add a CDATA section after the current content of ``element``.

    Byte strings are base64 encoded, text is stored as it is.
    """
    _require_element(element)
    if data is None:
        raise InvalidArgumentError("Illegal null CDATA value")
    if isinstance(data, (bytes, bytearray)):
        data = base64.b64encode(bytes(data)).decode('ascii')
    try:
        cdata = etree.CDATA(data)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(str(e)) from e
    if len(element):
        if element[-1].tail is None:
            element[-1].tail = cdata
        else:
            _append_to_slot(element, cdata)
    elif element.text is None:
        element.text = cdata
    else:
        _append_to_slot(element, cdata)


def _append_top_level(document_tree, node):
    last = document_tree.getroot()
    while last.getnext() is not None:
        last = last.getnext()
    last.addnext(node)


def append_comment(element, text):
    try:
        comment = etree.Comment(text)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e
    if is_document(element):
        _append_top_level(element, comment)
    else:
        element.append(comment)


def append_reference(element, name):
    _require_element(element)
    try:
        entity = etree.Entity(name)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(str(e)) from e
    element.append(entity)


def _make_pi(target, data):
    try:
        return etree.PI(target, data)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(str(e)) from e


def append_instruction(element, target, data=None):
    """Append a processing instruction to ``element``, or after the
    last top-level node when given the document node.
    """
    pi = _make_pi(target, data)
    if is_document(element):
        _append_top_level(element, pi)
    else:
        element.append(pi)


def insert_instruction(element, target, data=None):
    """Insert a processing instruction as the very first node of the
    document that ``element`` belongs to, outside of the root element.
    """
    pi = _make_pi(target, data)
    if is_document(element):
        first = element.getroot()
    else:
        first = element.getroottree().getroot()
    while first.getprevious() is not None:
        first = first.getprevious()
    first.addprevious(pi)


def strip_whitespace_text(element):
    """Remove all whitespace-only text from the subtree of ``element``.

    CDATA sections, comments and processing instructions are left alone,
    and so is any text that shares its slot with a CDATA section.  The
    tail of ``element`` itself is outside of the subtree.
    """
    removed = 0
    for node in element.iter():
        if (isinstance(node.tag, str) and node.text is not None
                and _is_whitespace(node.text)
                and not _slot_kinds(_slot_markup(node))[0]):
            node.text = None
            removed += 1
        if (node is not element and node.tail is not None
                and _is_whitespace(node.tail)
                and not _slot_kinds(_slot_markup(node, tail=True))[0]):
            node.tail = None
            removed += 1
    logger.debug("removed %d whitespace-only text nodes below %r",
                 removed, node_name(element))
    return removed


def has_text_children(element):
    if element.text is not None and _slot_kinds(_slot_markup(element))[1]:
        return True
    for child in element:
        if child.tail is not None and _slot_kinds(_slot_markup(child, tail=True))[1]:
            return True
    return False


def import_subtree(target, source):
    """Append a deep copy of ``source`` to ``target`` and return the copy.

    The element may come from any document.  Attributes and namespace
    declarations are copied unchanged.
    """
    _require_element(target)
    if has_text_children(target):
        raise InvalidStateError(
            "Cannot import a subtree into element %r, it contains text nodes"
            % node_name(target))
    clone = copy.deepcopy(source)
    clone.tail = None
    target.append(clone)
    logger.debug("imported subtree %r into %r",
                 node_name(clone), node_name(target))
    return clone
