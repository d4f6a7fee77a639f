#===============================================================================
# MODULE apidoc
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Decorators and a Sphinx autodoc-skip-member handler that together decide
# which simvariate classes and functions appear in the API documentation.
#
#    @apidoc:     Marks a class (and therefore its module) for inclusion in
#                 the API documentation.
#
#    @apidocskip: Marks a function or method for exclusion. Needed for
#                 module-level functions (which autodoc otherwise always
#                 includes) and for members of @apidoc classes.
#
# Registration only happens when the SIMVARIATE_GEN_APIDOC environment
# variable is set (by the docs makefile), so the decorators cost nothing
# at model run time.
#===============================================================================
import os, inspect

_GEN_APIDOC_ENV_NAME = 'SIMVARIATE_GEN_APIDOC'

generating_docs = bool(os.getenv(_GEN_APIDOC_ENV_NAME))

# Fully qualified names of the classes to document
documented_classes = set()

# Names of the modules containing at least one documented class
documented_modules = set()

# Fully qualified names of the functions/methods to leave out
functions_to_skip = set()


def qualified_name(obj):
    """
    Return the module-qualified name of a class, function or property.
    """
    if isinstance(obj, (property, staticmethod, classmethod)):
        obj = obj.fget if isinstance(obj, property) else obj.__func__
    name = getattr(obj, '__qualname__', None) or obj.__name__
    return '{0}.{1}'.format(obj.__module__, name)


def apidoc(cls):
    """
    Class decorator; registers the class and its module for documentation.
    """
    if generating_docs:
        documented_classes.add(qualified_name(cls))
        documented_modules.add(cls.__module__)
    return cls


def apidocskip(func):
    """
    Function/method decorator; registers the function to be skipped.
    """
    if generating_docs:
        functions_to_skip.add(qualified_name(func))
    return func


def docskip(app, what, name, obj, skip, options):
    """
    Sphinx ``autodoc-skip-member`` handler. Register it from conf.py::

         def setup(app):
             app.connect('autodoc-skip-member', apidoc.docskip)
    """
    if inspect.ismodule(obj):
        return obj.__name__ not in documented_modules
    if inspect.isclass(obj):
        return qualified_name(obj) not in documented_classes
    if inspect.isroutine(obj) or isinstance(obj, property):
        return qualified_name(obj) in functions_to_skip or skip
    return skip
