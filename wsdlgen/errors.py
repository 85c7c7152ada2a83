class WsdlGenError(Exception):
    pass


class ConfigurationError(WsdlGenError, ValueError):
    pass


class InvalidEndpointURIError(ConfigurationError):
    pass


class ReflectionError(WsdlGenError):
    pass


class NoPrototypeError(ReflectionError):
    pass


class SchemaGenerationError(WsdlGenError):
    pass


class StateError(WsdlGenError):
    pass


class DocumentNotInitializedError(StateError):
    pass
