import pytest

from wsdlgen.context import RequestContext
from wsdlgen.errors import InvalidEndpointURIError


def test_from_cgi_environ():
    context = RequestContext.from_environ({
        'HTTPS': 'on',
        'HTTP_HOST': 'example.com',
        'SERVER_NAME': 'internal',
        'REQUEST_URI': '/soap/server.py?wsdl',
        'SCRIPT_NAME': '/soap/server.py',
    })

    assert context.uri == 'https://example.com/soap/server.py'
    assert context.service_name == 'server'


def test_from_wsgi_environ():
    context = RequestContext.from_environ({
        'wsgi.url_scheme': 'http',
        'SERVER_NAME': 'localhost',
        'SCRIPT_NAME': '/app',
        'PATH_INFO': '/billing',
    })

    assert context.uri == 'http://localhost/app/billing'
    assert context.service_name == 'app'


def test_rewrite_url_takes_precedence():
    context = RequestContext.from_environ({
        'HTTP_HOST': 'example.com',
        'HTTP_X_REWRITE_URL': '/rewritten?x=1',
        'REQUEST_URI': '/original',
    })

    assert context.uri == 'http://example.com/rewritten'


def test_script_name_falls_back_to_argv(monkeypatch):
    monkeypatch.setattr('sys.argv', ['/usr/local/bin/billing.wsgi'])

    assert RequestContext.from_environ({}).service_name == 'billing'


def test_uri_requires_host():
    with pytest.raises(InvalidEndpointURIError):
        RequestContext(path='/soap').uri
