import pytest
from lxml import etree

from wsdlgen.namespaces import NSMAP
from wsdlgen.reflection import Reflection
from wsdlgen.wsdl import Wsdl

from sample_services import Customer, Node

URI = 'http://localhost/soap/server'


@pytest.fixture
def reflection():
    return Reflection(classmap={'Customer': Customer, 'Node': Node})


@pytest.fixture
def make_wsdl(reflection):
    def make(strategy=True):
        return Wsdl('Test', URI, strategy, reflection=reflection)
    return make


@pytest.fixture
def parse():
    def parse_xml(text):
        return etree.fromstring(text.encode('utf-8'))
    return parse_xml


@pytest.fixture
def complex_type_names():
    def names(root):
        return [ct.get('name') for ct in
                root.findall('wsdl:types/xsd:schema/xsd:complexType', namespaces=NSMAP)]
    return names
