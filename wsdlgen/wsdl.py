import logging
import sys

from lxml import etree

from wsdlgen.namespaces import NSMAP, SOAP_HTTP_TRANSPORT, qname
from wsdlgen.reflection import Reflection
from wsdlgen.strategy import get_strategy

logger = logging.getLogger(__name__)

XSD_TYPE_MAP = {
    'string': 'xsd:string',
    'str': 'xsd:string',
    'int': 'xsd:int',
    'integer': 'xsd:int',
    'float': 'xsd:float',
    'double': 'xsd:float',
    'bool': 'xsd:boolean',
    'boolean': 'xsd:boolean',
    'bytes': 'xsd:base64Binary',
    'decimal': 'xsd:decimal',
    'datetime': 'xsd:dateTime',
    'date': 'xsd:date',
    'time': 'xsd:time',
    'array': 'soap-enc:Array',
    'list': 'soap-enc:Array',
    'tuple': 'soap-enc:Array',
    'struct': 'soap-enc:Struct',
    'dict': 'soap-enc:Struct',
    'object': 'soap-enc:Struct',
    'mixed': 'xsd:anyType',
    'any': 'xsd:anyType',
    'void': '',
}

_GROUP_TAGS = ('sequence', 'all', 'choice')


class Wsdl:
    """A WSDL 1.1 document under construction."""

    def __init__(self, name, uri, strategy=True, reflection=None):
        self._name = name
        self._uri = str(uri)
        self._schema = None
        self._types = {}
        self.reflection = reflection if reflection is not None else Reflection()

        self._dom = etree.Element(qname('wsdl:definitions'), nsmap=dict(NSMAP, tns=self._uri))
        self._dom.set('name', name)
        self._dom.set('targetNamespace', self._uri)

        self.set_complex_type_strategy(strategy)

    def get_name(self):
        return self._name

    def get_uri(self):
        return self._uri

    def set_uri(self, uri):
        uri = str(uri)
        # nsmap is fixed on creation, so the children move to a fresh root
        root = etree.Element(self._dom.tag, nsmap=dict(NSMAP, tns=uri))
        for key, value in self._dom.attrib.items():
            root.set(key, value)
        root.set('targetNamespace', uri)
        root.extend(list(self._dom))
        self._dom = root
        if self._schema is not None:
            self._schema.set('targetNamespace', uri)
        self._uri = uri
        return self

    def set_complex_type_strategy(self, strategy):
        self._strategy = get_strategy(strategy)
        self._strategy.set_context(self)
        return self

    def get_complex_type_strategy(self):
        return self._strategy

    def to_dom(self):
        return self._dom

    def add_schema_type_section(self):
        if self._schema is None:
            types = etree.Element(qname('wsdl:types'))
            self._dom.insert(0, types)
            self._schema = etree.SubElement(types, qname('xsd:schema'))
            self._schema.set('targetNamespace', self._uri)
        return self

    def get_schema(self):
        if self._schema is None:
            self.add_schema_type_section()
        return self._schema

    def add_type(self, type_name, wsdl_type):
        self._types[type_name] = wsdl_type
        return self

    def get_types(self):
        return list(self._types)

    def get_registered_type(self, type_name):
        return self._types.get(type_name)

    def get_type(self, type_name):
        key = type_name.strip().lower()
        if key in XSD_TYPE_MAP:
            return XSD_TYPE_MAP[key]
        return self._strategy.resolve(type_name)

    def add_element(self, element):
        self.get_schema().append(self._parse_element(element))
        return 'tns:' + element['name']

    def _parse_element(self, element):
        node = etree.Element(qname('xsd:element'))
        for key, value in element.items():
            if key in _GROUP_TAGS:
                complex_type = etree.SubElement(node, qname('xsd:complexType'))
                group = etree.SubElement(complex_type, qname('xsd:' + key))
                for child in value:
                    group.append(self._parse_element(child))
            else:
                node.set(key, str(value))
        return node

    def add_message(self, name, parts):
        message = etree.SubElement(self._dom, qname('wsdl:message'))
        message.set('name', name)
        for part_name, part_type in parts.items():
            part = etree.SubElement(message, qname('wsdl:part'))
            part.set('name', part_name)
            if isinstance(part_type, dict):
                for key, value in part_type.items():
                    part.set(key, value)
            else:
                part.set('type', part_type)
        return message

    def add_port_type(self, name):
        port_type = etree.SubElement(self._dom, qname('wsdl:portType'))
        port_type.set('name', name)
        return port_type

    def add_port_operation(self, port_type, name, input=None, output=None):
        operation = etree.SubElement(port_type, qname('wsdl:operation'))
        operation.set('name', name)
        for direction, message in (('input', input), ('output', output)):
            if message:
                node = etree.SubElement(operation, qname('wsdl:' + direction))
                node.set('message', message)
        return operation

    def add_binding(self, name, port_type):
        binding = etree.SubElement(self._dom, qname('wsdl:binding'))
        binding.set('name', name)
        binding.set('type', port_type)
        return binding

    def add_binding_operation(self, binding, name, input=None, output=None):
        operation = etree.SubElement(binding, qname('wsdl:operation'))
        operation.set('name', name)
        for direction, body in (('input', input), ('output', output)):
            if body is None:
                continue
            node = etree.SubElement(operation, qname('wsdl:' + direction))
            soap_body = etree.SubElement(node, qname('soap:body'))
            for key, value in body.items():
                soap_body.set(key, str(value))
        return operation

    def add_soap_binding(self, binding, style='document', transport=SOAP_HTTP_TRANSPORT):
        soap_binding = etree.Element(qname('soap:binding'))
        soap_binding.set('style', style)
        soap_binding.set('transport', transport)
        binding.insert(0, soap_binding)
        return soap_binding

    def add_soap_operation(self, operation, soap_action):
        soap_operation = etree.Element(qname('soap:operation'))
        soap_operation.set('soapAction', str(soap_action))
        operation.insert(0, soap_operation)
        return soap_operation

    def add_service(self, name, port_name, binding, location):
        service = etree.SubElement(self._dom, qname('wsdl:service'))
        service.set('name', name)
        port = etree.SubElement(service, qname('wsdl:port'))
        port.set('name', port_name)
        port.set('binding', binding)
        address = etree.SubElement(port, qname('soap:address'))
        address.set('location', str(location))
        return service

    def add_documentation(self, node, documentation):
        doc = etree.Element(qname('wsdl:documentation'))
        doc.text = documentation
        node.insert(0, doc)
        return doc

    def to_xml(self):
        return etree.tostring(self._dom, encoding='utf-8', xml_declaration=True,
                              pretty_print=True).decode('utf-8')

    def dump(self, filename=None):
        if filename is None:
            sys.stdout.write(self.to_xml())
        else:
            etree.ElementTree(self._dom).write(filename, encoding='utf-8', xml_declaration=True,
                                               pretty_print=True)
            logger.debug("Wrote WSDL %s to %s", self._name, filename)
        return True
