import os
import sys

from wsdlgen.errors import InvalidEndpointURIError


class RequestContext:
    """Where the WSDL is being served from.

    Only used to default the endpoint URI and the service name of a document
    when they are not configured explicitly.
    """

    def __init__(self, scheme='http', host=None, path='/', script_name=None):
        self.scheme = scheme
        self.host = host
        self.path = path.split('?', 1)[0] or '/'
        self.script_name = script_name

    @classmethod
    def from_environ(cls, environ):
        """Build a context out of CGI or WSGI environment variables."""
        if environ.get('HTTPS') == 'on':
            scheme = 'https'
        else:
            scheme = environ.get('wsgi.url_scheme', 'http')
        host = environ.get('HTTP_HOST') or environ.get('SERVER_NAME')

        # IIS sets the rewrite header, so check it first
        path = (environ.get('HTTP_X_REWRITE_URL')
                or environ.get('REQUEST_URI')
                or environ.get('ORIG_PATH_INFO')
                or environ.get('SCRIPT_NAME', '') + environ.get('PATH_INFO', ''))
        script_name = environ.get('SCRIPT_NAME') or sys.argv[0]
        return cls(scheme, host, path, script_name)

    @property
    def uri(self):
        if not self.host:
            raise InvalidEndpointURIError("Cannot detect the endpoint URI: the request context has no host.")
        return f'{self.scheme}://{self.host}{self.path}'

    @property
    def service_name(self):
        return os.path.basename(self.script_name or '').split('.')[0]

    def __repr__(self):
        return f'RequestContext({self.scheme!r}, {self.host!r}, {self.path!r}, {self.script_name!r})'
