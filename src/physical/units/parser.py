from __future__ import annotations

from fractions import Fraction
from functools import lru_cache
from typing import TYPE_CHECKING, Callable, Tuple, Union

from physical.core.errors import UnknownUnit
from physical.core.unit import DIMENSIONLESS, CompositeUnit, UnitDefinition

if TYPE_CHECKING:
    from physical.units.registry import UnitsRegistry

Exponent = Union[int, Fraction, float]

# --- Plan node types ------------------------------------------------
# ("name", <str>, None)
# ("one", None, None)
# ("pow", <plan>, <exponent>)
# ("mul", <plan>, <plan>)
# ("div", <plan>, <plan>)
Plan = Tuple[str, Union[str, "Plan", None], Union[Exponent, "Plan", None]]

_SUPERSCRIPT_CHARS = "⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺"
_FROM_SUPERSCRIPT = str.maketrans(_SUPERSCRIPT_CHARS, "0123456789-+")
_NAME_EXTRA = "_°µΩ'%"

# ---------------- Parser that builds a PLAN (no registry lookups!) ----------------
class _UnitExprParser:
    """
    Grammar:
      expr     := term (('*' | '/' | '·') term)*
      term     := factor [('**' | '^') exponent | superscripts]
      factor   := NAME | '1' | '(' expr ')'
      exponent := signed_number | '(' signed_int '/' int ')' | '(' signed_number ')'
      NAME     := (letter | '_' | '°' | '%') (letter | digit | '_' | '°' | '%')*
    Integer and rational exponents stay exact; decimal exponents are floats.
    """
    def __init__(self, text: str):
        self.s = text
        self.n = len(text)
        self.i = 0

    def parse(self) -> Plan:
        plan = self._parse_expr()
        self._skip_ws()
        if self.i != self.n:
            raise ValueError(f"Unexpected trailing input at {self.i}: {self.s[self.i:self.i+10]!r}")
        return plan

    # expr := term (('*' | '/' | '·') term)*
    def _parse_expr(self) -> Plan:
        left = self._parse_term()
        while True:
            self._skip_ws()
            if (self._peek('*') and not self._peek('**')) or self._peek('·'):
                self.i += 1
                right = self._parse_term()
                left = ("mul", left, right)
            elif self._peek('/'):
                self._eat('/')
                right = self._parse_term()
                left = ("div", left, right)
            else:
                break
        return left

    def _parse_term(self) -> Plan:
        base = self._parse_factor()
        self._skip_ws()
        if self._peek('**'):
            self._eat('**')
            base = ("pow", base, self._parse_exponent())
        elif self._peek('^'):
            self._eat('^')
            base = ("pow", base, self._parse_exponent())
        elif self.i < self.n and self.s[self.i] in _SUPERSCRIPT_CHARS:
            i0 = self.i
            while self.i < self.n and self.s[self.i] in _SUPERSCRIPT_CHARS:
                self.i += 1
            text = self.s[i0:self.i].translate(_FROM_SUPERSCRIPT)
            try:
                base = ("pow", base, int(text))
            except ValueError:
                raise ValueError(f"Malformed superscript exponent at {i0}: {text!r}") from None
        return base

    def _parse_factor(self) -> Plan:
        self._skip_ws()
        if self._peek('('):
            self._eat('(')
            val = self._parse_expr()
            self._skip_ws()
            self._eat(')')
            return val
        if self._peek('1'):
            self._eat('1')
            return ("one", None, None)
        name = self._parse_name()
        if not name:
            ch = self.s[self.i:self.i+1]
            raise ValueError(f"Expected unit name or '(' at {self.i}, got {ch!r}")
        return ("name", name, None)

    def _parse_exponent(self) -> Exponent:
        self._skip_ws()
        if self._peek('('):
            self._eat('(')
            num = self._parse_number()
            self._skip_ws()
            if self._peek('/'):
                self._eat('/')
                den = self._parse_number()
                if not isinstance(num, int) or not isinstance(den, int):
                    raise ValueError("Rational exponents must be written as (int/int)")
                if den == 0:
                    raise ValueError("Zero denominator in exponent")
                num = Fraction(num, den)
            self._skip_ws()
            self._eat(')')
            return num
        return self._parse_number()

    # ---- token helpers ----
    def _parse_name(self) -> str | None:
        self._skip_ws()
        i0 = self.i
        if i0 < self.n and (self.s[i0].isalpha() or self.s[i0] in _NAME_EXTRA):
            self.i += 1
            while self.i < self.n and self._is_name_char(self.s[self.i]):
                self.i += 1
            return self.s[i0:self.i]
        return None

    @staticmethod
    def _is_name_char(ch: str) -> bool:
        if ch in _SUPERSCRIPT_CHARS:
            return False
        return ch.isalnum() or ch in _NAME_EXTRA

    def _parse_number(self) -> int | float:
        self._skip_ws()
        i0 = self.i
        if self.i < self.n and self.s[self.i] in '+-':
            self.i += 1
        i1 = self.i
        while self.i < self.n and (self.s[self.i].isdigit() or self.s[self.i] == '.'):
            self.i += 1
        text = self.s[i0:self.i]
        if i1 == self.i:
            raise ValueError(f"Expected numeric exponent at {self.i}")
        try:
            return float(text) if '.' in text else int(text)
        except ValueError:
            raise ValueError(f"Malformed exponent {text!r} at {i0}") from None

    def _skip_ws(self) -> None:
        s, n, i = self.s, self.n, self.i
        while i < n and s[i].isspace():
            i += 1
        self.i = i

    def _peek(self, tok: str) -> bool:
        self._skip_ws()
        return self.s[self.i:self.i+len(tok)] == tok

    def _eat(self, tok: str) -> None:
        if not self._peek(tok):
            got = self.s[self.i:self.i+len(tok)]
            raise ValueError(f"Expected {tok!r} at {self.i}, got {got!r}")
        self.i += len(tok)

# ---------------- Evaluation of a plan against a resolver ----------------
def _eval_plan(plan: Plan, resolve: Callable[[str], UnitDefinition]) -> CompositeUnit:
    kind = plan[0]
    if kind == "name":
        name = plan[1]
        try:
            return resolve(name).as_unit()  # late binding to the provided registry
        except UnknownUnit as e:
            raise UnknownUnit(name, f"in unit expression: {e}") from None
    elif kind == "one":
        return DIMENSIONLESS
    elif kind == "pow":
        return _eval_plan(plan[1], resolve) ** plan[2]
    elif kind == "mul":
        return _eval_plan(plan[1], resolve) * _eval_plan(plan[2], resolve)
    elif kind == "div":
        return _eval_plan(plan[1], resolve) / _eval_plan(plan[2], resolve)
    else:
        raise RuntimeError(f"Invalid plan node: {plan!r}")

# ---------------- Public API with caching-safe compilation ----------------
# Cache the *compiled plan* only. Safe across registries because there's no bound objects inside.
@lru_cache(maxsize=4096)
def _compile_unit_expr(expr: str) -> Plan:
    # cheap prefilter to reject disallowed characters early
    disallowed = set('~!@#$&|=,:;?<>"`\\[]{}')
    if any(c in disallowed for c in expr):
        raise ValueError("Only *, /, **, ^, parentheses, unit names, and numeric exponents are allowed.")
    return _UnitExprParser(expr).parse()


def evaluate_unit_expr(expr: str, resolve: Callable[[str], UnitDefinition]) -> CompositeUnit:
    return _eval_plan(_compile_unit_expr(expr), resolve)


def extract_unit_expr(expr: str, reg: "UnitsRegistry") -> CompositeUnit:
    """
    Parse unit expressions like 'kg*m/(s**2)', 'm^(1/2)' or 'kg·m/s²'.

    Caching-safety:
      * We cache a compiled syntax plan keyed by `expr` only (no registry state).
      * Evaluation binds names to definitions from the *provided* `reg` at call time.

    Allowed syntax:
      * Operators '*', '·', '/', and '**' or '^' with an integer, '(p/q)'
        rational or decimal exponent; unicode superscript exponents.
      * Parentheses, '1' (as in '1/s') and unit names.
      * Anything else raises ValueError.
    """
    return evaluate_unit_expr(expr, reg.get)
