#!/usr/bin/env python3
"""
mini_compiler.py
Single-file front-end compiler pipeline for a tiny imperative language
(lexer → recursive-descent parser → semantic check → three-address IR).

The language has `int` and `float` declarations with an optional initializer,
assignment, `print <id>;` and arithmetic over numbers and identifiers with
`+ - * /`. Semantic analysis does not compute values: it records the textual
composition of each expression, which is enough to check declaration and
initialization order.
"""

import argparse
import logging
import re
import sys
from collections import namedtuple

# =====================================================
# LOGGING
# =====================================================
def get_logger(name="mini_compiler"):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler(stream=sys.stdout)
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    return logger

logger = get_logger()

# =====================================================
# ERRORS
# =====================================================
class CompilerError(Exception):
    kind = "CompilerError"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

class ParseError(CompilerError):
    kind = "SyntaxError"

    def __init__(self, detail, position, token=None):
        super().__init__(f"Syntax error at position {position}: {detail}")
        self.detail = detail
        self.position = position
        self.token = token

class AlreadyDeclaredError(CompilerError):
    kind = "AlreadyDeclaredError"

    def __init__(self, name):
        super().__init__(f"Variable '{name}' already declared.")
        self.name = name

class UndeclaredVariableError(CompilerError):
    kind = "UndeclaredVariableError"

    def __init__(self, name):
        super().__init__(f"Undeclared variable '{name}'")
        self.name = name

class UninitializedOperandError(CompilerError):
    kind = "UninitializedOperandError"

    def __init__(self, name, op):
        super().__init__(f"Cannot perform operation '{op}' on uninitialized variable '{name}'")
        self.name = name
        self.op = op

class InternalConsistencyError(CompilerError):
    kind = "InternalConsistencyError"

class CompilationError(CompilerError):
    """Single failure value handed back by compile_source.

    `stage` names the stage that stopped the pipeline and `cause` is the
    stage error that stopped it.
    """
    kind = "CompilationFailed"

    def __init__(self, stage, message, cause=None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause

# =====================================================
# SYMBOL TABLE
# =====================================================
class Value:
    """What the analyzer knows about a variable's contents.

    Either nothing (uninitialized), a literal's text, or the text of the
    expression that was last assigned, e.g. "3 + x".
    """
    UNINITIALIZED = 'uninitialized'
    LITERAL = 'literal'
    COMPOSED = 'composed'

    __slots__ = ('kind', 'text')

    def __init__(self, kind, text=None):
        self.kind = kind
        self.text = text

    @classmethod
    def literal(cls, text):
        return cls(cls.LITERAL, text)

    @classmethod
    def composed(cls, text):
        return cls(cls.COMPOSED, text)

    @property
    def is_initialized(self):
        return self.kind != Value.UNINITIALIZED

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return (self.kind, self.text) == (other.kind, other.text)

    def __hash__(self):
        return hash((self.kind, self.text))

    def __repr__(self):
        if not self.is_initialized:
            return "Value(uninitialized)"
        return f"Value({self.kind}, {self.text!r})"

    def __str__(self):
        return self.text if self.is_initialized else 'null'

UNINITIALIZED = Value(Value.UNINITIALIZED)

SymbolEntry = namedtuple('SymbolEntry', ['declared_type', 'value'])

class SymbolTable:
    def __init__(self):
        # name -> SymbolEntry, kept in declaration order
        self.table = {}

    def declare(self, name, declared_type, value=UNINITIALIZED):
        self.table[name] = SymbolEntry(declared_type, value)

    def update_value(self, name, value):
        entry = self.table[name]
        self.table[name] = entry._replace(value=value)

    def exists(self, name):
        return name in self.table

    __contains__ = exists

    def get_type(self, name):
        entry = self.table.get(name)
        return entry.declared_type if entry else None

    def get_value(self, name):
        entry = self.table.get(name)
        return entry.value if entry else None

    def entries(self):
        return [(name, e.declared_type, e.value) for name, e in self.table.items()]

    def __len__(self):
        return len(self.table)

    def format(self):
        if not self.table:
            return "Symbol table is empty"
        lines = ["Name\tType\tValue"]
        for name, typ, value in self.entries():
            lines.append(f"{name}\t{typ}\t{value}")
        return "\n".join(lines)

# =====================================================
# LEXER
# =====================================================
KEYWORD = 'Keyword'
IDENTIFIER = 'Identifier'
FLOAT_NUMBER = 'FloatNumber'
NUMBER = 'Number'
ASSIGNMENT = 'Assignment'
OPERATOR = 'Operator'
SEPARATOR = 'Separator'

KEYWORDS = ('int', 'float', 'print')

class Token(namedtuple('Token', ['kind', 'text', 'lineno'])):
    __slots__ = ()

    def __str__(self):
        return f"[{self.kind}] {self.text}"

EOF = Token('EOF', '', None)

def _is_word_char(ch):
    return ch.isalnum() or ch == '_'

# Matchers take (line, pos) and return the end of the match or None.
def match_keyword(line, pos):
    # keywords only count on word boundaries: `integer` and `int5` are identifiers
    if pos > 0 and _is_word_char(line[pos - 1]):
        return None
    for kw in KEYWORDS:
        end = pos + len(kw)
        if line.startswith(kw, pos) and (end == len(line) or not _is_word_char(line[end])):
            return end
    return None

def pattern_matcher(pattern):
    regex = re.compile(pattern)

    def matcher(line, pos):
        mo = regex.match(line, pos)
        return mo.end() if mo else None
    return matcher

class Lexer:
    # priority order: the first matcher that succeeds at a position wins
    MATCHERS = [
        (KEYWORD,      match_keyword),
        (IDENTIFIER,   pattern_matcher(r'[a-zA-Z_][a-zA-Z0-9_]*')),
        (FLOAT_NUMBER, pattern_matcher(r'\d+\.\d+')),
        (NUMBER,       pattern_matcher(r'\d+')),
        (ASSIGNMENT,   pattern_matcher(r'=')),
        (OPERATOR,     pattern_matcher(r'[+\-*/]')),
        (SEPARATOR,    pattern_matcher(r'[;()]')),
    ]

    def tokenize(self, code):
        tokens = []
        for lineno, line in enumerate(code.split('\n'), start=1):
            if not line.strip():
                continue
            logger.debug("Lexing line %d: %s", lineno, line.strip())
            tokens.extend(self._tokenize_line(line, lineno))
        return tokens

    def _tokenize_line(self, line, lineno):
        pos = 0
        while pos < len(line):
            for kind, matcher in self.MATCHERS:
                end = matcher(line, pos)
                if end is not None:
                    tok = Token(kind, line[pos:end], lineno)
                    logger.debug("  Found token: %s '%s'", tok.kind, tok.text)
                    yield tok
                    pos = end
                    break
            else:
                # nothing matches here: drop the character
                pos += 1

def tokenize(code):
    return Lexer().tokenize(code)

# =====================================================
# AST NODES
# =====================================================
class Node:
    node_type = None

    @property
    def value(self):
        return ''

    @property
    def children(self):
        return []

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        pending = [(self, other)]
        while pending:
            a, b = pending.pop()
            if not isinstance(b, Node):
                return False
            if (a.node_type, a.value) != (b.node_type, b.value):
                return False
            kids_a, kids_b = a.children, b.children
            if len(kids_a) != len(kids_b):
                return False
            pending.extend(zip(kids_a, kids_b))
        return True

    __hash__ = None

    def __repr__(self):
        args = [repr(self.value)] if self.value else []
        args += [repr(c) for c in self.children]
        return f"{self.node_type}({', '.join(args)})"

class Program(Node):
    node_type = 'Program'

    def __init__(self, statements):
        self.statements = statements

    @property
    def children(self):
        return list(self.statements)

class Declaration(Node):
    node_type = 'Declaration'

    def __init__(self, var_type, name, init_expr=None, lineno=None):
        self.var_type = var_type  # 'int' | 'float'
        self.name = name
        self.init_expr = init_expr
        self.lineno = lineno

    @property
    def value(self):
        return self.var_type

    @property
    def children(self):
        kids = [Identifier(self.name)]
        if self.init_expr is not None:
            kids.append(self.init_expr)
        return kids

class Assignment(Node):
    node_type = 'Assignment'

    def __init__(self, name, expr, lineno=None):
        self.name = name
        self.expr = expr
        self.lineno = lineno

    @property
    def value(self):
        return '='

    @property
    def children(self):
        return [Identifier(self.name), self.expr]

class Print(Node):
    node_type = 'Print'

    def __init__(self, name, lineno=None):
        self.name = name
        self.lineno = lineno

    @property
    def value(self):
        return 'print'

    @property
    def children(self):
        return [Identifier(self.name)]

class BinaryOp(Node):
    node_type = 'BinaryOp'

    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right

    @property
    def value(self):
        return self.op

    @property
    def children(self):
        return [self.left, self.right]

class Identifier(Node):
    node_type = 'Identifier'

    def __init__(self, name):
        self.name = name

    @property
    def value(self):
        return self.name

class Number(Node):
    node_type = 'Number'

    def __init__(self, text):
        self.text = text  # literal text as written, int or float

    @property
    def value(self):
        return self.text

def postorder(expr):
    """Yield the nodes of an expression children-first, left before right.

    Operator chains are as deep as they are long, so the walk keeps its own
    stack instead of recursing. Anything that is not a BinaryOp is a leaf.
    """
    stack = [(expr, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or not isinstance(node, BinaryOp):
            yield node
        else:
            stack.append((node, True))
            stack.append((node.right, False))
            stack.append((node.left, False))

def format_ast(node, indent=0):
    lines = []
    stack = [(node, indent)]
    while stack:
        current, depth = stack.pop()
        lines.append(f"{'  ' * depth}{current.node_type}: {current.value}")
        for child in reversed(current.children):
            stack.append((child, depth + 1))
    return "\n".join(lines)

# =====================================================
# PARSER (recursive-descent, LL(1) style)
# =====================================================
class Parser:
    def __init__(self, tokens):
        self.tokens = tokens
        self.pos = 0

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return EOF

    def peek_n(self, n):
        idx = self.pos + n
        if idx < len(self.tokens):
            return self.tokens[idx]
        return EOF

    def advance(self):
        tok = self.peek()
        self.pos += 1
        return tok

    def check(self, kind, text=None):
        tok = self.peek()
        return tok.kind == kind and (text is None or tok.text == text)

    def match(self, kind, text=None):
        if self.check(kind, text):
            self.advance()
            return True
        return False

    def expect(self, kind, text=None):
        if self.check(kind, text):
            return self.advance()
        self.fail(f"Expected {kind} '{text or '<any>'}'")

    def fail(self, what):
        tok = self.peek()
        found = 'EOF' if tok is EOF else tok.text
        raise ParseError(f"{what}, found: {found}", self.pos, None if tok is EOF else tok)

    def parse(self):
        stmts = []
        while self.peek() is not EOF:
            stmts.append(self.statement())
        return Program(stmts)

    def statement(self):
        tok = self.peek()
        if self.check(KEYWORD, 'int') or self.check(KEYWORD, 'float'):
            return self.declaration()
        if tok.kind == IDENTIFIER and self.peek_n(1).kind == ASSIGNMENT:
            return self.assignment()
        if self.check(KEYWORD, 'print'):
            return self.print_statement()
        tok_text = 'EOF' if tok is EOF else tok.text
        raise ParseError(f"Unexpected token: {tok_text}", self.pos, tok)

    def declaration(self):
        t = self.advance()  # type keyword
        logger.debug("[Syntax] Parsing %s variable declaration...", t.text)
        id_tok = self.expect(IDENTIFIER)
        init_expr = None
        if self.match(ASSIGNMENT):
            init_expr = self.expression()
        self.expect(SEPARATOR, ';')
        return Declaration(t.text, id_tok.text, init_expr, t.lineno)

    def assignment(self):
        logger.debug("[Syntax] Parsing assignment statement...")
        id_tok = self.expect(IDENTIFIER)
        self.expect(ASSIGNMENT)
        expr = self.expression()
        self.expect(SEPARATOR, ';')
        return Assignment(id_tok.text, expr, id_tok.lineno)

    def print_statement(self):
        tok = self.advance()  # print
        logger.debug("[Syntax] Parsing print statement...")
        id_tok = self.expect(IDENTIFIER)
        self.expect(SEPARATOR, ';')
        return Print(id_tok.text, tok.lineno)

    # Expressions: one function per precedence tier
    def expression(self):
        node = self.term()
        while self.check(OPERATOR, '+') or self.check(OPERATOR, '-'):
            op = self.advance().text
            right = self.term()
            node = BinaryOp(op, node, right)
        return node

    def term(self):
        node = self.factor()
        while self.check(OPERATOR, '*') or self.check(OPERATOR, '/'):
            op = self.advance().text
            right = self.factor()
            node = BinaryOp(op, node, right)
        return node

    def factor(self):
        tok = self.peek()
        if tok.kind in (NUMBER, FLOAT_NUMBER):
            self.advance()
            return Number(tok.text)
        if tok.kind == IDENTIFIER:
            self.advance()
            return Identifier(tok.text)
        self.fail("Expected identifier or number in expression")

def parse(tokens):
    return Parser(tokens).parse()

# =====================================================
# SEMANTIC ANALYZER
# =====================================================
class SemanticAnalyzer:
    def __init__(self, symbols):
        self.symbols = symbols

    def analyze(self, program):
        logger.debug("Starting semantic analysis...")
        for node in program.statements:
            if isinstance(node, Declaration):
                logger.debug("Analyzing declaration of variable '%s' as %s", node.name, node.var_type)
                if node.name in self.symbols:
                    raise AlreadyDeclaredError(node.name)
                value = UNINITIALIZED
                if node.init_expr is not None:
                    value = self.evaluate(node.init_expr)
                self.symbols.declare(node.name, node.var_type, value)
            elif isinstance(node, Assignment):
                logger.debug("Analyzing assignment to variable '%s'", node.name)
                if node.name not in self.symbols:
                    raise UndeclaredVariableError(node.name)
                self.symbols.update_value(node.name, self.evaluate(node.expr))
            elif isinstance(node, Print):
                logger.debug("Analyzing print statement for variable '%s'", node.name)
                if node.name not in self.symbols:
                    raise UndeclaredVariableError(node.name)
            else:
                raise InternalConsistencyError(f"Unsupported statement type: {node.node_type}")
        logger.debug("Semantic analysis completed successfully")

    def evaluate(self, expr):
        values = []
        for node in postorder(expr):
            if isinstance(node, Number):
                values.append(Value.literal(node.text))
            elif isinstance(node, Identifier):
                if node.name not in self.symbols:
                    raise UndeclaredVariableError(node.name)
                values.append(self.symbols.get_value(node.name))
            elif isinstance(node, BinaryOp):
                right = values.pop()
                left = values.pop()
                # only an Identifier operand can come back uninitialized
                for operand, val in ((node.left, left), (node.right, right)):
                    if not val.is_initialized:
                        raise UninitializedOperandError(operand.value, node.op)
                logger.debug("    Operation: %s %s %s", left.text, node.op, right.text)
                values.append(Value.composed(f"{left.text} {node.op} {right.text}"))
            else:
                node_type = getattr(node, 'node_type', type(node).__name__)
                raise InternalConsistencyError(f"Unsupported node type in expression: {node_type}")
        return values.pop()

def analyze(program, symbols=None):
    if symbols is None:
        symbols = SymbolTable()
    SemanticAnalyzer(symbols).analyze(program)
    return symbols

# =====================================================
# IR (TAC) GENERATION
# =====================================================
class TACInstruction:
    OPS = {'+': 'add', '-': 'sub', '*': 'mul', '/': 'div'}
    SYMBOLS = {v: k for k, v in OPS.items()}

    def __init__(self, op, dest=None, arg1=None, arg2=None):
        self.op = op
        self.dest = dest
        self.arg1 = arg1
        self.arg2 = arg2

    def __repr__(self):
        if self.op == 'declare':
            return f"DECLARE {self.dest} as {self.arg1}"
        if self.op == 'print':
            return f"PRINT {self.arg1}"
        if self.op == 'assign':
            return f"{self.dest} = {self.arg1}"
        return f"{self.dest} = {self.arg1} {self.SYMBOLS[self.op]} {self.arg2}"

class IRGenerator:
    def __init__(self):
        self.tac = []
        self.temp_count = 0

    def new_temp(self):
        temp = f"t{self.temp_count}"
        self.temp_count += 1
        return temp

    def emit(self, instr):
        logger.debug("    Generated: %r", instr)
        self.tac.append(instr)

    def gen(self, program):
        logger.debug("Generating intermediate code...")
        for node in program.statements:
            if isinstance(node, Declaration):
                if node.init_expr is not None:
                    t = self.gen_expr(node.init_expr)
                    self.emit(TACInstruction('assign', dest=node.name, arg1=t))
                else:
                    self.emit(TACInstruction('declare', dest=node.name, arg1=node.var_type))
            elif isinstance(node, Assignment):
                t = self.gen_expr(node.expr)
                self.emit(TACInstruction('assign', dest=node.name, arg1=t))
            elif isinstance(node, Print):
                self.emit(TACInstruction('print', arg1=node.name))
            else:
                raise InternalConsistencyError(f"Unsupported statement type: {node.node_type}")
        return self.tac

    def gen_expr(self, expr):
        # postorder visits left before right: temp numbering depends on it
        operands = []
        for node in postorder(expr):
            if isinstance(node, Number):
                operands.append(node.text)
            elif isinstance(node, Identifier):
                operands.append(node.name)
            elif isinstance(node, BinaryOp):
                b = operands.pop()
                a = operands.pop()
                op = TACInstruction.OPS.get(node.op)
                if op is None:
                    raise InternalConsistencyError(f"unknown binary op {node.op}")
                dest = self.new_temp()
                self.emit(TACInstruction(op, dest=dest, arg1=a, arg2=b))
                operands.append(dest)
            else:
                node_type = getattr(node, 'node_type', type(node).__name__)
                raise InternalConsistencyError(f"Unsupported node type in expression: {node_type}")
        return operands.pop()

def generate(program):
    return [repr(instr) for instr in IRGenerator().gen(program)]

# =====================================================
# COMPILER DRIVER
# =====================================================
def _fail(result, stage, message, cause):
    err = CompilationError(stage, message, cause)
    result['error'] = err
    result['errors'] = [err.message]
    logger.info("Compilation failed during %s: %s", stage, message)
    return result

def _new_result():
    # fresh state for every run
    return {
        'tokens': [],
        'ast': None,
        'tac': [],
        'symbol_table': SymbolTable(),
        'error': None,
        'errors': [],
    }

def _check_and_generate(result, ast):
    result['ast'] = ast

    try:
        SemanticAnalyzer(result['symbol_table']).analyze(ast)
    except CompilerError as exc:
        return _fail(result, 'semantic', exc.message, exc)
    except Exception as exc:
        return _fail(result, 'semantic', "Semantic analysis failed", exc)

    try:
        result['tac'] = [repr(t) for t in IRGenerator().gen(ast)]
    except Exception as exc:
        return _fail(result, 'codegen', "Intermediate code generation failed", exc)

    return result

def compile_ast(ast):
    """Run the checking and generation stages on an already built tree."""
    return _check_and_generate(_new_result(), ast)

def compile_source(code, verbose=False):
    previous = logger.level
    if verbose:
        logger.setLevel(logging.DEBUG)
    try:
        result = _new_result()
        toks = tokenize(code)
        result['tokens'] = toks

        try:
            ast = parse(toks)
        except ParseError as exc:
            return _fail(result, 'syntax', exc.message, exc)

        return _check_and_generate(result, ast)
    finally:
        logger.setLevel(previous)

# =====================================================
# SOURCE READER / CONSOLE REPORT
# =====================================================
def read_source(stream):
    """Read lines until the first blank one (or end of input)."""
    lines = []
    for line in stream:
        if not line.strip():
            break
        lines.append(line.rstrip('\n') + '\n')
    return ''.join(lines)

def format_report(result):
    out = ["=== LEXICAL ANALYSIS ===", "", "--- Tokens ---"]
    out += [str(tok) for tok in result['tokens']]

    out += ["", "=== SYNTAX ANALYSIS ==="]
    if result['ast'] is not None:
        out += ["", "--- Abstract Syntax Tree ---", format_ast(result['ast'])]

    err = result['error']
    if err is None:
        out += ["", "=== INTERMEDIATE CODE GENERATION ===", "", "--- Intermediate Code ---"]
        out += result['tac']
        out += ["", "=== SYMBOL TABLE ===", result['symbol_table'].format()]
    else:
        out += ["", f"COMPILATION FAILED: {err.message}"]
        if err.cause is not None and str(err.cause) != err.message:
            out.append(f"Details: {err.cause}")
    return "\n".join(out)

def main(argv=None):
    ap = argparse.ArgumentParser(description="Compile a mini-language program read from stdin.")
    ap.add_argument('-v', '--verbose', action='store_true', help="log every pipeline step")
    args = ap.parse_args(argv)

    print("Enter source code (end with an empty line):")
    code = read_source(sys.stdin)
    result = compile_source(code, verbose=args.verbose)
    print()
    print(format_report(result))
    return 1 if result['error'] else 0

if __name__ == '__main__':
    sys.exit(main())
