# -*- coding: utf-8 -*-

"""
Tests for creating and parsing documents.
"""

import pathlib
import unittest

from io import BytesIO, StringIO

from xmlbuilder import Document, XMLBuilder, make_parser
from xmlbuilder import ParseError, ConfigurationError, InvalidArgumentError

from .common_imports import (
    HelperTestCase, make_suite, tmpfile, _bytes, EXAMPLE_XML_DOC)


class DocumentTestCase(HelperTestCase):

    def test_create(self):
        document = Document.create('root', 'urn:x')
        self.assertEqual('{urn:x}root', document.getroot().tag)
        self.assertIs(document.getroot(), document.getroottree().getroot())
        self.assertFalse(document.standalone)

    def test_parse_text(self):
        document = Document.parse(EXAMPLE_XML_DOC)
        self.assertEqual('Projects', document.getroot().tag)
        self.assertEqual(2, len(document.getroot()))

    def test_parse_bytes(self):
        document = Document.parse(_bytes(EXAMPLE_XML_DOC))
        self.assertEqual('Projects', document.getroot().tag)

    def test_parse_text_with_encoding_declaration(self):
        document = Document.parse(
            u'<?xml version="1.0" encoding="ISO-8859-1"?><root>é</root>')
        self.assertEqual(u'é', document.getroot().text)
        self.assertEqual('ISO-8859-1', document.encoding)
        self.assertEqual('1.0', document.xml_version)

    def test_parse_file_objects(self):
        document = Document.parse(StringIO(EXAMPLE_XML_DOC))
        self.assertEqual('Projects', document.getroot().tag)
        document = Document.parse(BytesIO(_bytes(EXAMPLE_XML_DOC)))
        self.assertEqual('Projects', document.getroot().tag)

    def test_parse_path(self):
        with tmpfile(suffix='.xml') as filename:
            with open(filename, 'wb') as f:
                f.write(_bytes(EXAMPLE_XML_DOC))
            builder = XMLBuilder.parse(pathlib.Path(filename))
            self.assertEqual(EXAMPLE_XML_DOC, builder.as_string())

    def test_parse_unsupported_source(self):
        self.assertRaises(InvalidArgumentError, Document.parse, 42)
        self.assertRaises(InvalidArgumentError, XMLBuilder.parse, None)

    def test_parse_error(self):
        try:
            XMLBuilder.parse('<root>\n<unclosed></root>')
        except ParseError as e:
            self.assertEqual(2, e.lineno)
            self.assertIsNotNone(e.position)
            self.assertIsNotNone(e.__cause__)
        else:
            self.fail("malformed document should raise ParseError")

    def test_parse_error_empty(self):
        self.assertRaises(ParseError, XMLBuilder.parse, '')
        self.assertRaises(ParseError, XMLBuilder.parse, '   ')

    def test_parse_keeps_cdata(self):
        builder = XMLBuilder.parse('<root><![CDATA[<kept>]]></root>')
        self.assertEqual('<root><![CDATA[<kept>]]></root>', builder.as_string())

    def test_parse_with_parser(self):
        parser = make_parser(remove_blank_text=True)
        builder = XMLBuilder.parse('<root>\n  <a/>\n</root>', parser)
        self.assertEqual('<root><a/></root>', builder.as_string())

    def test_make_parser_invalid(self):
        self.assertRaises(ConfigurationError, make_parser, no_such_option=True)

    def test_standalone(self):
        document = Document.parse(
            _bytes('<?xml version="1.0" standalone="yes"?><root/>'))
        self.assertTrue(document.standalone)
        self.assertTrue(document.docinfo.standalone)
        document.standalone = False
        self.assertFalse(document.standalone)

    def test_repr(self):
        self.assertIn("'root'", repr(Document.create('root')))


def test_suite():
    return make_suite(DocumentTestCase)

if __name__ == '__main__':
    unittest.main()
