"""Recipe models, the recipe table and the declaration file parser."""

from .cargo import CargoRecipe, cargo_declaration, cargo_declaration_text
from .models import (
    AllPositional,
    DeclarationSettings,
    Interpolated,
    Literal,
    Parameter,
    ParamRef,
    Positional,
    Recipe,
    Token,
)
from .parser import (
    DECLARATION_NAMES,
    Declaration,
    find_declaration,
    load_declaration,
    parse_declaration,
    parse_template,
)
from .table import RecipeTable

__all__ = [
    "AllPositional",
    "CargoRecipe",
    "DECLARATION_NAMES",
    "Declaration",
    "DeclarationSettings",
    "Interpolated",
    "Literal",
    "Parameter",
    "ParamRef",
    "Positional",
    "Recipe",
    "RecipeTable",
    "Token",
    "cargo_declaration",
    "cargo_declaration_text",
    "find_declaration",
    "load_declaration",
    "parse_declaration",
    "parse_template",
]
