"""Transpiler for live-coding source with embedded pattern notation."""

__version__ = "0.1.0"

# Errors
from minitranspile.errors import ProgramShapeError as ProgramShapeError
from minitranspile.errors import TranspileError as TranspileError
from minitranspile.errors import TranspileSyntaxError as TranspileSyntaxError

# Mini-notation locations
from minitranspile.mini import MiniLocation as MiniLocation
from minitranspile.mini import get_leaf_locations as get_leaf_locations
from minitranspile.mini import get_tidal_locations as get_tidal_locations

# Registry
from minitranspile.registry import DEFAULT_REGISTRY as DEFAULT_REGISTRY
from minitranspile.registry import MINILANG as MINILANG
from minitranspile.registry import Registry as Registry
from minitranspile.registry import SubLanguage as SubLanguage
from minitranspile.registry import clear_registry as clear_registry
from minitranspile.registry import register_sub_language as register_sub_language
from minitranspile.registry import register_widget_method as register_widget_method

# Transpiler
from minitranspile.transpiler import TransformResult as TransformResult
from minitranspile.transpiler import TranspileOptions as TranspileOptions
from minitranspile.transpiler import transpile as transpile

# Widgets
from minitranspile.widgets import Widget as Widget
from minitranspile.widgets import widget_id as widget_id
