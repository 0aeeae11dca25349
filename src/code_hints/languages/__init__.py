"""Language front ends that turn tree-sitter parse trees into SyntaxNode trees.

Importing this package registers every front end with the FrontEndRegistry.
Languages without a front end are analysed by the text-scan collector.
"""

from .base_frontend import FrontEndRegistry, LanguageFrontEnd
from .java_frontend import JavaFrontEnd
from .javascript_frontend import JavaScriptFrontEnd
from .python_frontend import PythonFrontEnd

__all__ = [
    "FrontEndRegistry",
    "LanguageFrontEnd",
    "JavaFrontEnd",
    "JavaScriptFrontEnd",
    "PythonFrontEnd",
]
