"""
🥥 CoconutTelegraph — robot behaviors encoded as dense ASCII strings.

| Layer                       | Purpose                                     |
<---------------------------- + ------------------------------------------->
| **Numeric literal reader**  | decimal / hex / negative integers, fail-soft |
| **Bracket extractor**       | depth-tracked capture of ``[...]`` ``{...}`` |
| **Macro expander**          | ultra-dense symbols → dense code            |
| **Dense parser**            | dense code → instruction tree               |
| **Interpreter**             | instruction tree → robot side effects       |
| **Behaviors**               | composable library programs                 |
| **Documents**               | canonical hashing and diffing               |
| **Visualization**           | NetworkX / Graphviz instruction graphs      |
"""

from . import literals as _literals
from . import diagnostics as _diagnostics
from . import macros as _macros
from . import core as _core
from . import compiler as _compiler
from . import robot as _robot
from . import interpreter as _interpreter
from . import behaviors as _behaviors
from . import serialize as _serialize
from . import analysis as _analysis
from .cli import load_program, main, parse_args, run_repl

from .literals import *
from .diagnostics import *
from .macros import *
from .core import *
from .compiler import *
from .robot import *
from .interpreter import *
from .behaviors import *
from .serialize import *
from .analysis import *

__all__ = []
for module in (
    _literals,
    _diagnostics,
    _macros,
    _core,
    _compiler,
    _robot,
    _interpreter,
    _behaviors,
    _serialize,
    _analysis,
):
    __all__.extend(getattr(module, "__all__", []))
__all__ += ["load_program", "main", "parse_args", "run_repl"]
__all__ = list(dict.fromkeys(__all__))
