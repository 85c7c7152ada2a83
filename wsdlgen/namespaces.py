WSDL_NS = "http://schemas.xmlsoap.org/wsdl/"
XSD_NS = "http://www.w3.org/2001/XMLSchema"

SOAPBIND_NS = "http://schemas.xmlsoap.org/wsdl/soap/"
SOAPENC_NS = "http://schemas.xmlsoap.org/soap/encoding/"

SOAP_HTTP_TRANSPORT = "http://schemas.xmlsoap.org/soap/http"

NSMAP = {
    'wsdl': WSDL_NS,
    'soap': SOAPBIND_NS,
    'xsd': XSD_NS,
    'soap-enc': SOAPENC_NS,
}


def qname(prefixed):
    # 'xsd:element' -> '{http://www.w3.org/2001/XMLSchema}element'
    prefix, local = prefixed.split(':', 1)
    return '{%s}%s' % (NSMAP[prefix], local)
