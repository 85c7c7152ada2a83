"""Generate a WSDL document by introspecting Python classes and functions.

::

    autodiscover = AutoDiscover(strategy='sequence', uri='http://example.com/soap')
    autodiscover.set_class(Billing)
    print(autodiscover.to_xml())

``AutoDiscover.handle`` is a WSGI application serving the generated document.
"""

import logging
from urllib.parse import ParseResult, SplitResult, urlsplit

from wsdlgen.errors import (ConfigurationError, DocumentNotInitializedError,
                            InvalidEndpointURIError, NoPrototypeError, SchemaGenerationError,
                            StateError)
from wsdlgen.namespaces import SOAP_HTTP_TRANSPORT, SOAPENC_NS
from wsdlgen.reflection import Reflection
from wsdlgen.strategy import get_strategy, translate_type
from wsdlgen.wsdl import Wsdl

logger = logging.getLogger(__name__)

BINDING_STYLES = ('rpc', 'document')
BODY_USES = ('encoded', 'literal')


def select_prototype(signature):
    """Return the prototype taking the most parameters; the first one seen wins a tie."""
    prototype = None
    for candidate in signature.prototypes:
        if prototype is None or len(candidate.parameters) > len(prototype.parameters):
            prototype = candidate
    if prototype is None:
        raise NoPrototypeError(f"No prototypes could be found for the '{signature.name}' function.")
    return prototype


class DocumentState:

    def __init__(self, wsdl, name, port, binding):
        self.wsdl = wsdl
        self.name = name
        self.port = port
        self.binding = binding


class AutoDiscover:

    def __init__(self, strategy=True, uri=None, wsdl_class=Wsdl, context=None, reflection=None):
        self._uri = None
        self._context = context
        self._reflection = reflection if reflection is not None else Reflection()
        self._document = None
        self._functions = []
        self._operation_body_style = {'use': 'encoded', 'encodingStyle': SOAPENC_NS}
        self._binding_style = {'style': 'rpc', 'transport': SOAP_HTTP_TRANSPORT}

        self.set_complex_type_strategy(strategy)
        self.set_wsdl_class(wsdl_class)
        if uri is not None:
            self.set_uri(uri)

    def set_uri(self, uri):
        if isinstance(uri, (SplitResult, ParseResult)):
            uri = uri.geturl()
        elif not isinstance(uri, str):
            raise InvalidEndpointURIError(f"No uri given as string or parsed URL: {uri!r}.")
        parts = urlsplit(uri)
        if not parts.scheme or not parts.netloc:
            raise InvalidEndpointURIError(f"Endpoint URI '{uri}' is not an absolute URI.")

        self._uri = uri
        if self._document is not None:
            self._document.wsdl.set_uri(uri)
        return self

    def get_uri(self):
        if self._uri is None:
            if self._context is None:
                raise InvalidEndpointURIError("No uri configured and no request context to detect it from.")
            self.set_uri(self._context.uri)
        return self._uri

    def set_wsdl_class(self, wsdl_class):
        if not (isinstance(wsdl_class, type) and issubclass(wsdl_class, Wsdl)):
            raise ConfigurationError(f"{wsdl_class!r} is not a Wsdl subclass.")
        self._wsdl_class = wsdl_class
        return self

    def get_wsdl_class(self):
        return self._wsdl_class

    def set_operation_body_style(self, style):
        """Set the attributes of every binding operation's soap:body.

        Defaults to ``use="encoded"`` with the SOAP encoding style.
        """
        if 'use' not in style:
            raise ConfigurationError("Key 'use' is required in operation soap:body style.")
        if style['use'] not in BODY_USES:
            raise ConfigurationError(f"Invalid soap:body use '{style['use']}', expected encoded or literal.")
        self._operation_body_style = dict(style)
        return self

    def set_binding_style(self, style):
        """Set the soap:binding style and transport, rpc over HTTP by default."""
        merged = dict(self._binding_style)
        for key in ('style', 'transport'):
            if style.get(key):
                merged[key] = style[key]
        if merged['style'] not in BINDING_STYLES:
            raise ConfigurationError(f"Invalid binding style '{merged['style']}', expected rpc or document.")
        if self._document is not None and merged != self._binding_style:
            raise StateError("Cannot change the binding style once the document has been created.")
        self._binding_style = merged
        return self

    def set_complex_type_strategy(self, strategy):
        # instantiated per document; resolved here only to fail early
        get_strategy(strategy)
        self._strategy = strategy
        if self._document is not None:
            self._document.wsdl.set_complex_type_strategy(strategy)
        return self

    def set_class(self, cls):
        """Describe every public method of ``cls`` in a new document."""
        signatures = self._reflection.reflect_class(cls)

        functions = []
        try:
            document = self._create_document(translate_type(Reflection.class_name(cls)))
            for signature in signatures:
                self._add_function_to_wsdl(signature, document, functions)
        except Exception:
            # a shared strategy instance must go back to the document being kept
            if self._document is not None:
                self._document.wsdl.get_complex_type_strategy().set_context(self._document.wsdl)
            raise

        self._document = document
        self._functions = functions
        return self

    def add_function(self, function, name=None):
        """Describe one or several functions, in the current document if there is one."""
        if not isinstance(function, (list, tuple)):
            function = [function]
        signatures = [self._reflection.reflect_function(func) for func in function]

        document = self._document
        if document is None:
            document = self._create_document(self._service_name(name))
            self._functions = []
        elif name is not None and translate_type(name) != document.name:
            raise StateError(f"Cannot add functions as '{name}' to the '{document.name}' document.")

        try:
            for signature in signatures:
                self._add_function_to_wsdl(signature, document, self._functions)
        except Exception:
            logger.debug("Discarding document %s after a failed operation", document.name)
            self._document = None
            self._functions = []
            raise
        self._document = document
        return self

    def _service_name(self, name):
        if name is None:
            if self._context is None:
                raise ConfigurationError("No service name given and no request context to derive it from.")
            name = self._context.service_name
        if not name:
            raise ConfigurationError("Cannot derive a service name for the functions.")
        return translate_type(name)

    def _create_document(self, name):
        uri = self.get_uri()
        wsdl = self._wsdl_class(name, uri, self._strategy, reflection=self._reflection)

        # The wsdl:types element must precede all other elements (WS-I Basic Profile 1.1 R2023)
        wsdl.add_schema_type_section()

        port = wsdl.add_port_type(name + 'Port')
        binding = wsdl.add_binding(name + 'Binding', 'tns:' + name + 'Port')
        wsdl.add_soap_binding(binding, self._binding_style['style'], self._binding_style['transport'])
        wsdl.add_service(name + 'Service', name + 'Port', 'tns:' + name + 'Binding', uri)

        logger.debug("Created %s style document %s at %s", self._binding_style['style'], name, uri)
        return DocumentState(wsdl, name, port, binding)

    def _add_function_to_wsdl(self, signature, document, functions):
        uri = self.get_uri()
        wsdl = document.wsdl
        prototype = select_prototype(signature)
        function_name = translate_type(signature.name)
        document_style = self._binding_style['style'] == 'document'

        # Add the input message (parameters)
        args = {}
        if document_style:
            sequence = []
            for param in prototype.parameters:
                element = {'name': param.name, 'type': self._part_type(wsdl, param.type, signature)}
                if param.optional:
                    element['nillable'] = 'true'
                sequence.append(element)
            # the wrapper element part must be named 'parameters'
            args['parameters'] = {'element': wsdl.add_element({'name': function_name, 'sequence': sequence})}
        else:
            for param in prototype.parameters:
                args[param.name] = {'type': self._part_type(wsdl, param.type, signature)}
        wsdl.add_message(function_name + 'In', args)

        one_way = prototype.return_type == 'void'
        if not one_way:
            # Add the output message (return value)
            return_type = self._part_type(wsdl, prototype.return_type, signature)
            if document_style:
                sequence = [{'name': function_name + 'Result', 'type': return_type}]
                element = wsdl.add_element({'name': function_name + 'Response', 'sequence': sequence})
                args = {'parameters': {'element': element}}
            else:
                args = {'return': {'type': return_type}}
            wsdl.add_message(function_name + 'Out', args)

        output = None if one_way else 'tns:' + function_name + 'Out'
        port_operation = wsdl.add_port_operation(document.port, function_name,
                                                 'tns:' + function_name + 'In', output)
        if signature.description:
            wsdl.add_documentation(port_operation, signature.description)

        # RPC style soap:body needs a namespace (WS-I Basic Profile 1.1 R2717)
        if not document_style and 'namespace' not in self._operation_body_style:
            self._operation_body_style['namespace'] = uri

        body = self._operation_body_style
        operation = wsdl.add_binding_operation(document.binding, function_name, body, body)
        wsdl.add_soap_operation(operation, f'{uri}#{function_name}')

        functions.append(signature.name)
        logger.debug("Added %s operation %s", 'one-way' if one_way else 'request-response', function_name)

    @staticmethod
    def _part_type(wsdl, type_name, signature):
        part_type = wsdl.get_type(type_name)
        if not part_type:
            raise SchemaGenerationError(f"Type '{type_name}' cannot be used in the '{signature.name}' messages.")
        return part_type

    def _require_document(self, action):
        if self._document is None:
            raise DocumentNotInitializedError(
                f"Cannot {action} autodiscovered contents, WSDL file has not been generated yet.")
        return self._document

    def get_functions(self):
        return list(self._functions)

    def get_wsdl(self):
        return self._require_document('return').wsdl

    def get_type(self, type_name):
        return self._require_document('resolve types of').wsdl.get_type(type_name)

    def to_xml(self):
        return self._require_document('return').wsdl.to_xml()

    def dump(self, filename=None):
        return self._require_document('dump').wsdl.dump(filename)

    def handle(self, environ, start_response):
        body = self.to_xml().encode('utf-8')
        start_response('200 OK', [
            ('Content-Type', 'text/xml; charset=utf-8'),
            ('Content-Length', str(len(body))),
        ])
        return [body]
