from wsdlgen.autodiscover import AutoDiscover
from wsdlgen.context import RequestContext
from wsdlgen.wsdl import Wsdl

__version__ = '0.1.0'

__all__ = ['AutoDiscover', 'RequestContext', 'Wsdl']
