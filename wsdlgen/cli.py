import argparse
import importlib
import json
import logging
import os
import sys
from wsgiref.simple_server import make_server

from wsdlgen.autodiscover import AutoDiscover
from wsdlgen.context import RequestContext
from wsdlgen.errors import ConfigurationError, WsdlGenError
from wsdlgen.namespaces import SOAPENC_NS
from wsdlgen.strategy import STRATEGIES

logger = logging.getLogger(__name__)


def load_config(config_path, service_name):
    with open(config_path, 'r', encoding='utf-8') as f:
        cfg = json.load(f)
    services = cfg.get('services', {})
    if service_name not in services:
        raise ConfigurationError(f"Service '{service_name}' not found in config.")
    return dict(services[service_name])


def build_options(args):
    options = {}
    if args.config:
        if not args.service:
            raise ConfigurationError("--service is required together with --config.")
        options = load_config(args.config, args.service)

    for key in ('module', 'name', 'uri', 'strategy'):
        value = getattr(args, key)
        if value is not None:
            options[key] = value
    if args.class_name:
        options['class'] = args.class_name
        options.pop('functions', None)
    if args.functions:
        options['functions'] = args.functions
        options.pop('class', None)
    if args.style:
        options['binding_style'] = dict(options.get('binding_style', {}), style=args.style)
    if args.use:
        body_style = {'use': args.use}
        if args.use == 'encoded':
            body_style['encodingStyle'] = SOAPENC_NS
        options['operation_body_style'] = body_style
    return options


def load_target(options):
    """Import the configured module and return ``(cls, functions)``, one of them None."""
    module_name = options.get('module')
    if not module_name:
        raise ConfigurationError("A 'module' to introspect is required.")
    if bool(options.get('class')) == bool(options.get('functions')):
        raise ConfigurationError("Exactly one of 'class' or 'functions' must be given.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import module '{module_name}': {exc}") from exc

    names = [options['class']] if options.get('class') else options['functions']
    found = []
    for name in names:
        obj = getattr(module, name, None)
        if obj is None:
            raise ConfigurationError(f"'{name}' not found in module '{module_name}'.")
        found.append(obj)

    if options.get('class'):
        return found[0], None
    return None, found


def build_autodiscover(options, context=None):
    autodiscover = AutoDiscover(strategy=options.get('strategy', True), uri=options.get('uri'),
                                context=context)
    if 'binding_style' in options:
        autodiscover.set_binding_style(options['binding_style'])
    if 'operation_body_style' in options:
        autodiscover.set_operation_body_style(options['operation_body_style'])

    cls, functions = load_target(options)
    if cls is not None:
        autodiscover.set_class(cls)
    else:
        name = options.get('name') or options['module'].rpartition('.')[2]
        autodiscover.add_function(functions, name=name)
    return autodiscover


def make_app(options):
    def app(environ, start_response):
        # a fresh document per request, the endpoint defaults to the requested URL
        autodiscover = build_autodiscover(options, RequestContext.from_environ(environ))
        return autodiscover.handle(environ, start_response)
    return app


def serve(options, address):
    host, _, port = address.rpartition(':')
    if not port.isdigit():
        raise ConfigurationError(f"Invalid --serve address '{address}', expected HOST:PORT.")
    load_target(options)
    httpd = make_server(host or 'localhost', int(port), make_app(options))
    logger.info("Serving WSDL on http://%s:%s/", host or 'localhost', port)
    httpd.serve_forever()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a WSDL document by introspecting Python callables.")
    parser.add_argument('--config', help="Path to the JSON config file.")
    parser.add_argument('--service', help="Name of the service entry in the config file.")
    parser.add_argument('--module', help="Python module holding the class or functions.")
    parser.add_argument('--class', dest='class_name', help="Class whose public methods become operations.")
    parser.add_argument('--function', dest='functions', action='append',
                        help="Function to describe, may be repeated.")
    parser.add_argument('--name', help="Service base name when describing functions.")
    parser.add_argument('--uri', help="Endpoint URI, detected from the CGI environment if omitted.")
    parser.add_argument('--strategy', choices=sorted(STRATEGIES), help="Complex type strategy.")
    parser.add_argument('--style', choices=['rpc', 'document'], help="soap:binding style.")
    parser.add_argument('--use', choices=['encoded', 'literal'], help="soap:body use.")
    parser.add_argument('--output', help="Path to the output WSDL file, stdout if omitted.")
    parser.add_argument('--serve', metavar='HOST:PORT', help="Serve the WSDL over HTTP instead.")
    parser.add_argument('-v', '--verbose', action='store_true', help="Log debug output.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        options = build_options(args)
        if args.serve:
            serve(options, args.serve)
            return 0
        context = None if options.get('uri') else RequestContext.from_environ(os.environ)
        build_autodiscover(options, context).dump(args.output)
    except WsdlGenError as exc:
        logger.debug("WSDL generation failed", exc_info=True)
        parser.error(str(exc))
    return 0


if __name__ == "__main__":
    sys.exit(main())
