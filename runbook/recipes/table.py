"""Ordered recipe table: define once at load time, look up by name."""

from __future__ import annotations

import difflib
from typing import Iterable, Iterator, Sequence

from runbook.errors import ParseError, UnknownRecipe

from .models import Parameter, ParamRef, Recipe, Token, token_refs


def _coerce_parameters(parameters: Sequence[Parameter | str], variadic: bool) -> tuple[Parameter, ...]:
    params = [p if isinstance(p, Parameter) else Parameter(str(p)) for p in parameters]
    if variadic:
        if not params:
            raise ParseError("variadic recipe needs at least one parameter")
        last = params[-1]
        if not last.variadic:
            params[-1] = Parameter(last.name, "star")
    return tuple(params)


def _validate(name: str, params: tuple[Parameter, ...], template: tuple[Token, ...], line: int | None) -> None:
    seen: set[str] = set()
    saw_default = False
    for i, p in enumerate(params):
        if p.name in seen:
            raise ParseError(f"recipe '{name}' declares parameter '{p.name}' twice", line=line)
        seen.add(p.name)
        if p.variadic and i != len(params) - 1:
            raise ParseError(f"variadic parameter '{p.name}' of recipe '{name}' must be last", line=line)
        if p.kind == "defaulted":
            saw_default = True
        elif p.kind == "required" and saw_default:
            raise ParseError(
                f"required parameter '{p.name}' of recipe '{name}' follows a parameter with a default",
                line=line,
            )
    for token in template:
        for ref in token_refs(token):
            if isinstance(ref, ParamRef) and ref.name not in seen:
                raise ParseError(f"recipe '{name}' references undeclared parameter '{ref.name}'", line=line)


class RecipeTable:
    """Recipes in declaration order. Frozen tables reject further definitions."""

    def __init__(self, recipes: Iterable[Recipe] = ()) -> None:
        self._recipes: dict[str, Recipe] = {}
        self._frozen = False
        for r in recipes:
            self._add(r)

    def define(
        self,
        name: str,
        parameters: Sequence[Parameter | str] = (),
        variadic: bool = False,
        template: Sequence[Token] = (),
        *,
        body: str = "",
        doc: str = "",
        quiet: bool = False,
        line: int = 0,
    ) -> Recipe:
        params = _coerce_parameters(parameters, variadic)
        recipe = Recipe(
            name=name,
            parameters=params,
            template=tuple(template),
            body=body,
            doc=doc,
            quiet=quiet,
            line=line,
        )
        self._add(recipe)
        return recipe

    def _add(self, recipe: Recipe) -> None:
        if self._frozen:
            raise RuntimeError("recipe table is frozen")
        line = recipe.line or None
        if recipe.name in self._recipes:
            raise ParseError(f"recipe '{recipe.name}' is defined more than once", line=line)
        _validate(recipe.name, recipe.parameters, recipe.template, line)
        self._recipes[recipe.name] = recipe

    def freeze(self) -> "RecipeTable":
        self._frozen = True
        return self

    def lookup(self, name: str) -> Recipe:
        try:
            return self._recipes[name]
        except KeyError:
            close = difflib.get_close_matches(name, list(self._recipes), n=3)
            raise UnknownRecipe(name, close) from None

    def default(self) -> Recipe | None:
        return next(iter(self._recipes.values()), None)

    def names(self) -> list[str]:
        return list(self._recipes)

    def __contains__(self, name: object) -> bool:
        return name in self._recipes

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)
