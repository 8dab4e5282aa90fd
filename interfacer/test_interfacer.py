#!/usr/bin/env python3
"""
Unit tests for the Solidity interfacer.

Run with: python3 -m pytest interfacer/test_interfacer.py
   or: python3 interfacer/test_interfacer.py
"""

import sys
import os
# Add parent directory to path so the package imports when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import io
import json
import tempfile
import textwrap
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from interfacer.cli import expand_sources, main
from interfacer.config import InterfacerConfig
from interfacer.diagnostics import DiagnosticSeverity, InterfacerDiagnostics
from interfacer.errors import ConfigError, MalformedSourceError
from interfacer.lexer import Lexer, TokenType
from interfacer.parser import (
    ArrayTypeName,
    ElementaryTypeName,
    FunctionDefinition,
    Mapping,
    ModifierInvocation,
    PragmaDirective,
    UserDefinedTypeName,
    parse_source,
)
from interfacer.synthesis import (
    InterfaceBuilder,
    InterfaceSynthesizer,
    MemberFilter,
    SourceCache,
    StructProjector,
    SynthesisContext,
    TypeResolver,
    build_record,
)
from interfacer.synthesis.members import is_exposed_function


def record_from(source: str, name: str = 'Contract.sol'):
    """Build a record from source text without touching the file system."""
    return build_record(Path('/virtual') / name, textwrap.dedent(source), 'UNLICENSED')


def write(root: Path, rel_path: str, source: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source).lstrip())
    return path


class SynthesisTestCase(unittest.TestCase):
    """Base class providing a temporary project directory."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()

    def tearDown(self):
        self._tmp.cleanup()

    def synthesizer(self, **options) -> InterfaceSynthesizer:
        options.setdefault('log_files', False)
        return InterfaceSynthesizer(InterfacerConfig(**options))


class TestLexer(unittest.TestCase):
    """Test tokenization of declaration-level Solidity."""

    def test_pragma_value_kept_verbatim(self):
        tokens = Lexer('pragma solidity >=0.8.0 <0.9.0;').tokenize()
        self.assertEqual(
            [t.type for t in tokens],
            [TokenType.PRAGMA, TokenType.IDENTIFIER, TokenType.PRAGMA_VALUE,
             TokenType.SEMICOLON, TokenType.EOF],
        )
        self.assertEqual(tokens[2].value, '>=0.8.0 <0.9.0')

    def test_comments_skipped(self):
        tokens = Lexer('// SPDX-License-Identifier: MIT\n/* block */ contract A {}').tokenize()
        self.assertEqual(tokens[0].type, TokenType.CONTRACT)
        self.assertEqual(tokens[0].line, 2)

    def test_elementary_types(self):
        tokens = Lexer('uint256 bytes32 address string bytes uintX Token').tokenize()
        types = [t.type for t in tokens[:-1]]
        self.assertEqual(types[:5], [TokenType.ELEMENTARY_TYPE] * 5)
        self.assertEqual(types[5:], [TokenType.IDENTIFIER, TokenType.IDENTIFIER])

    def test_mapping_arrow_and_operators(self):
        tokens = Lexer('mapping(address => bool) x = a >= b;').tokenize()
        self.assertIn(TokenType.ARROW, [t.type for t in tokens])
        self.assertIn('>=', [t.value for t in tokens if t.type == TokenType.OPERATOR])


class TestParser(unittest.TestCase):
    """Test the declaration parser."""

    def test_import_forms(self):
        unit = parse_source('''
        import "./A.sol";
        import "../lib/B.sol" as B;
        import * as C from "@oz/C.sol";
        import {D, E as F} from "./DE.sol";
        ''')
        self.assertEqual([i.path for i in unit.imports],
                         ['./A.sol', '../lib/B.sol', '@oz/C.sol', './DE.sol'])
        self.assertEqual(unit.imports[1].unit_alias, 'B')
        self.assertEqual(unit.imports[2].unit_alias, 'C')
        self.assertEqual(unit.imports[3].symbols, [('D', None), ('E', 'F')])

    def test_contract_header(self):
        unit = parse_source('''
        pragma solidity ^0.8.20;
        abstract contract C is A, B(1, 2), Lib.Base {}
        ''')
        self.assertEqual(unit.pragmas[0].name, 'solidity')
        self.assertEqual(unit.pragmas[0].value, '^0.8.20')
        contract = unit.contracts[0]
        self.assertTrue(contract.is_abstract)
        self.assertEqual(contract.kind, 'contract')
        self.assertEqual(contract.base_contracts, ['A', 'B', 'Lib.Base'])

    def test_members_and_skipped_constructs(self):
        unit = parse_source('''
        contract Vault {
            using SafeMath for uint256;
            event Deposited(address indexed who, uint256 amount);
            error Unauthorized(address caller);
            modifier onlyOwner() { require(msg.sender == owner, "}"); _; }
            struct Position { uint256 amount; address owner; }
            enum Side { Buy, Sell }
            uint256[] public xs = [1, 2];
            mapping(address => mapping(uint256 => bool)) public flags;
            constructor(uint256 x) Ownable(msg.sender) { xs.push(x); }
            receive() external payable {}
            function() external {}
            function pay(address payable to, string calldata memo) external onlyOwner returns (bool ok) {
                if (true) { return true; }
            }
        }
        ''')
        contract = unit.contracts[0]
        kinds = [type(node).__name__ for node in contract.sub_nodes]
        self.assertEqual(kinds, [
            'StructDefinition', 'EnumDefinition', 'StateVariableDeclaration',
            'StateVariableDeclaration', 'FunctionDefinition', 'FunctionDefinition',
            'FunctionDefinition', 'FunctionDefinition',
        ])
        self.assertEqual(contract.enums[0].members, ['Buy', 'Sell'])

        flags = contract.state_variables[1].variables[0]
        self.assertEqual(flags.visibility, 'public')
        self.assertIsInstance(flags.type_name, Mapping)
        self.assertIsInstance(flags.type_name.value_type, Mapping)

        xs = contract.state_variables[0].variables[0].type_name
        self.assertIsInstance(xs, ArrayTypeName)
        self.assertEqual(xs.base_type, ElementaryTypeName('uint256'))

        constructor, receive, fallback, pay = contract.functions
        self.assertEqual((constructor.name, constructor.kind), (None, 'constructor'))
        self.assertEqual((receive.name, receive.kind), (None, 'receive'))
        self.assertEqual((fallback.name, fallback.kind), (None, 'fallback'))
        self.assertEqual(pay.name, 'pay')
        self.assertEqual(pay.visibility, 'external')
        self.assertEqual([m.name for m in pay.modifiers], ['onlyOwner'])
        self.assertEqual(pay.parameters[0].type_name, ElementaryTypeName('address payable'))
        self.assertEqual(pay.parameters[1].storage_location, 'calldata')
        self.assertEqual(pay.return_parameters[0].name, 'ok')

    def test_default_visibility_and_qualified_types(self):
        unit = parse_source('''
        contract Old {
            function legacy(Lib.Pos memory p, uint256[3] memory fixedArr) returns (uint) {}
        }
        ''')
        function = unit.contracts[0].functions[0]
        self.assertEqual(function.visibility, 'default')
        self.assertEqual(function.parameters[0].type_name, UserDefinedTypeName('Lib.Pos'))
        self.assertEqual(function.parameters[1].type_name.length, '3')

    def test_file_level_types(self):
        unit = parse_source('''
        struct Point { int256 x; int256 y; }
        enum Color { Red }
        uint256 constant MAX = 10;
        function helper() pure returns (uint256) { return 1; }
        interface IShape { function area() external view returns (uint256); }
        ''')
        self.assertEqual([s.name for s in unit.structs], ['Point'])
        self.assertEqual([e.name for e in unit.enums], ['Color'])
        self.assertEqual(unit.contracts[0].kind, 'interface')

    def test_syntax_error(self):
        with self.assertRaises(SyntaxError):
            parse_source('contract { }')


class TestTypeResolver(unittest.TestCase):
    """Test projection of declared types into interface types."""

    SOURCE = '''
    pragma solidity ^0.8.0;
    contract Market {
        struct Order { uint256 id; }
        enum Side { Buy, Sell }
    }
    '''

    def setUp(self):
        self.ctx = SynthesisContext(record_from(self.SOURCE, 'Market.sol'))
        self.resolver = TypeResolver(self.ctx)

    def test_elementary_types(self):
        self.assertEqual(self.resolver.resolve(ElementaryTypeName('uint256')), 'uint256')
        self.assertEqual(self.resolver.resolve(ElementaryTypeName('address payable')), 'address payable')

    def test_reference_primitives_carry_location(self):
        self.assertEqual(self.resolver.resolve(ElementaryTypeName('string')), 'string memory')
        self.assertEqual(self.resolver.resolve(ElementaryTypeName('string'), 'calldata'), 'string calldata')
        self.assertEqual(self.resolver.resolve(ElementaryTypeName('bytes'), 'storage'), 'bytes memory')

    def test_arrays(self):
        strings = ArrayTypeName(ElementaryTypeName('string'))
        self.assertEqual(self.resolver.resolve(strings), 'string[] memory')
        orders = ArrayTypeName(UserDefinedTypeName('Order'), '3')
        self.assertEqual(self.resolver.resolve(orders, 'calldata'), 'Order[3] calldata')
        self.assertIn('Order', self.ctx.used_types)

    def test_user_defined_types(self):
        self.assertEqual(self.resolver.resolve(UserDefinedTypeName('Order')), 'Order memory')
        self.assertEqual(self.resolver.resolve(UserDefinedTypeName('Market.Order')), 'Order memory')
        self.assertEqual(self.resolver.resolve(UserDefinedTypeName('Side')), 'Side')
        self.assertEqual(self.resolver.resolve(UserDefinedTypeName('Token')), 'Token')
        self.assertEqual(self.resolver.resolve(UserDefinedTypeName('Lib.Pos'), 'memory'), 'Lib.Pos memory')
        self.assertTrue({'Order', 'Side', 'Token', 'Lib.Pos', 'Lib'} <= self.ctx.used_types)

    def test_mapping_resolves_to_value(self):
        mapping = Mapping(ElementaryTypeName('address'), ElementaryTypeName('string'))
        self.assertEqual(self.resolver.resolve(mapping), 'string memory')

    def test_function_type_unresolvable(self):
        self.assertIsNone(self.resolver.resolve(ElementaryTypeName('function')))

    def test_raw_types_only(self):
        ctx = SynthesisContext(record_from(self.SOURCE, 'Market.sol'), only_raw_types=True)
        resolver = TypeResolver(ctx)
        self.assertIsNone(resolver.resolve(UserDefinedTypeName('Order')))
        self.assertIsNone(resolver.resolve(ArrayTypeName(UserDefinedTypeName('Order'))))
        self.assertNotIn('Order', ctx.used_types)
        self.assertEqual(resolver.resolve(ElementaryTypeName('bool')), 'bool')

    def test_getter_key_types(self):
        nested = Mapping(
            ElementaryTypeName('string'),
            Mapping(ElementaryTypeName('address'), ElementaryTypeName('bool')),
        )
        self.assertEqual(self.resolver.getter_key_types(nested), ['string memory', 'address'])
        self.assertEqual(self.resolver.getter_key_types(ElementaryTypeName('uint256')), [])

    def test_struct_members_have_no_location(self):
        self.assertEqual(self.resolver.resolve_member(ElementaryTypeName('string')), 'string')
        self.assertEqual(self.resolver.resolve_member(ArrayTypeName(UserDefinedTypeName('Order'))), 'Order[]')


class TestMemberFilter(unittest.TestCase):
    """Test selection of externally visible members."""

    def members(self, source: str, **ctx_options) -> MemberFilter:
        ctx = SynthesisContext(record_from(source), **ctx_options)
        return MemberFilter(ctx, TypeResolver(ctx))

    def test_nested_mapping_getter(self):
        members = self.members('''
        pragma solidity ^0.8.0;
        contract Bank {
            mapping(address => mapping(uint256 => bool)) public balances;
        }
        ''')
        self.assertEqual(
            members.getter_stubs(),
            ['function balances(address, uint256) external view returns (bool);'],
        )

    def test_visibility_filter(self):
        members = self.members('''
        pragma solidity ^0.8.0;
        contract Vault {
            uint256 public totalSupply;
            uint256 internal secret;
            constructor(uint256 x) {}
            receive() external payable {}
            fallback() external {}
            function deposit(uint256 amount) external payable {}
            function _move(uint256 amount) internal {}
            function peek() private view returns (uint256) { return 1; }
            function name() public pure returns (string memory) { return "v"; }
            function legacy(uint256 a) returns (uint256) { return a; }
        }
        ''')
        self.assertEqual(members.function_stubs(), [
            'function deposit(uint256 amount) external payable;',
            'function name() external pure returns (string memory);',
            'function legacy(uint256 a) external returns (uint256);',
        ])
        self.assertEqual(members.getter_stubs(),
                         ['function totalSupply() external view returns (uint256);'])

    def test_hiding_modifiers(self):
        hidden = FunctionDefinition(name='f', visibility='public',
                                    modifiers=[ModifierInvocation('internal')])
        self.assertFalse(is_exposed_function(hidden))
        self.assertFalse(is_exposed_function(FunctionDefinition(name=None, visibility='external')))
        self.assertTrue(is_exposed_function(FunctionDefinition(name='f', visibility='external')))

    def test_unresolvable_stub_dropped(self):
        members = self.members('''
        pragma solidity ^0.8.0;
        contract Vault {
            mapping(address => Token) public tokens;
            function deposit(Token token, uint256 amount) external {}
            function total() external view returns (uint256) {}
            function hook(function (uint256) external callback) external {}
        }
        ''', only_raw_types=True)
        self.assertEqual(members.function_stubs(),
                         ['function total() external view returns (uint256);'])
        self.assertEqual(members.getter_stubs(), [])

    def test_dropped_stub_leaves_types_unused(self):
        ctx = SynthesisContext(record_from('''
        pragma solidity ^0.8.0;
        contract C {
            struct S { uint256 a; }
            mapping(Token => function (uint256) external) public hooks;
            function f(S memory s, function (uint256) external cb) external {}
            function g() external {}
        }
        ''', 'C.sol'))
        members = MemberFilter(ctx, TypeResolver(ctx))
        self.assertEqual(members.function_stubs(), ['function g() external;'])
        self.assertEqual(members.getter_stubs(), [])
        self.assertNotIn('S', ctx.used_types)
        self.assertNotIn('Token', ctx.used_types)


class TestStructProjector(unittest.TestCase):
    """Test re-declaration of local types."""

    SOURCE = '''
    pragma solidity ^0.8.0;
    contract Book {
        enum Side { Buy, Sell }
        struct Inner { uint256 v; Side side; }
        struct Outer { Inner inner; string label; }
        struct Unused { uint256 x; }
        function top() external view returns (Outer memory) {}
    }
    '''

    def test_used_types_projected_to_fixpoint(self):
        ctx = SynthesisContext(record_from(self.SOURCE, 'Book.sol'))
        resolver = TypeResolver(ctx)
        MemberFilter(ctx, resolver).function_stubs()
        stubs = StructProjector(ctx, resolver).stubs()
        self.assertEqual(stubs, [
            'enum Side { Buy, Sell }',
            'struct Inner {\n    uint256 v;\n    Side side;\n}',
            'struct Outer {\n    Inner inner;\n    string label;\n}',
        ])

    def test_raw_types_only_suppresses_structs(self):
        ctx = SynthesisContext(record_from(self.SOURCE, 'Book.sol'), only_raw_types=True)
        ctx.used_types.add('Outer')
        self.assertEqual(StructProjector(ctx, TypeResolver(ctx)).stubs(), [])

    def test_struct_with_unprojectable_member_is_dropped_whole(self):
        ctx = SynthesisContext(record_from('''
        pragma solidity ^0.8.0;
        contract Registry {
            struct Account { uint256 id; mapping(address => bool) approved; }
            struct Wrapper { Account[] accounts; }
            struct Plain { uint256 id; }
            function account() external view returns (Account memory) {}
            function wrapper(Wrapper calldata w) external {}
            function plain() external view returns (Plain memory) {}
        }
        ''', 'Registry.sol'))
        self.assertEqual(ctx.unprojectable_structs, frozenset({'Account', 'Wrapper'}))
        resolver = TypeResolver(ctx)
        self.assertEqual(MemberFilter(ctx, resolver).function_stubs(),
                         ['function plain() external view returns (Plain memory);'])
        ctx.used_types.add('Account')
        self.assertEqual(StructProjector(ctx, resolver).stubs(),
                         ['struct Plain {\n    uint256 id;\n}'])


class TestInterfaceBuilder(unittest.TestCase):
    """Test rendering of interface text."""

    def test_render_layout(self):
        builder = InterfaceBuilder('IC', 'MIT', PragmaDirective('solidity', '^0.8.0'))
        builder.add_import('import "./IA.sol";')
        builder.add_import('import "./IA.sol";')
        builder.inherit(['IA', 'IB'])
        builder.add_group([], spaced=True)
        builder.add_group(['function a() external view returns (uint256);'])
        builder.add_group(['function b() external;', 'function c() external;'])
        self.assertEqual(builder.render(), textwrap.dedent('''\
            // SPDX-License-Identifier: MIT
            pragma solidity ^0.8.0;

            import "./IA.sol";

            interface IC is IA, IB {
                function a() external view returns (uint256);

                function b() external;
                function c() external;
            }
            '''))


class TestSourceCache(SynthesisTestCase):
    """Test loading and memoization of source records."""

    def load(self, cache: SourceCache, *paths):
        async def _load():
            return await asyncio.gather(*(cache.load(p) for p in paths))
        return asyncio.run(_load())

    def test_missing_file_gives_placeholder(self):
        diagnostics = InterfacerDiagnostics()
        cache = SourceCache('UNLICENSED', diagnostics)
        record, = self.load(cache, self.root / 'Missing.sol')
        self.assertFalse(record.exists)
        self.assertEqual(record.declared_type_names, ())
        self.assertIsNone(record.contract_kind)
        self.assertEqual([w.code for w in diagnostics.warnings], ['W001'])

    def test_missing_pragma_is_fatal(self):
        path = write(self.root, 'NoPragma.sol', 'contract NoPragma {}')
        cache = SourceCache('UNLICENSED', InterfacerDiagnostics())
        with self.assertRaises(MalformedSourceError) as raised:
            self.load(cache, path)
        self.assertIn('NoPragma.sol', str(raised.exception))

    def test_missing_contract_is_fatal(self):
        path = write(self.root, 'Empty.sol', 'pragma solidity ^0.8.0;\nstruct S { uint256 a; }')
        cache = SourceCache('UNLICENSED', InterfacerDiagnostics())
        with self.assertRaises(MalformedSourceError):
            self.load(cache, path)

    def test_concurrent_loads_share_one_record(self):
        path = write(self.root, 'A.sol', 'pragma solidity ^0.8.0;\ncontract A {}')
        cache = SourceCache('UNLICENSED', InterfacerDiagnostics())
        first, second = self.load(cache, path, str(path))
        self.assertIs(first, second)
        third, = self.load(cache, path)
        self.assertIs(first, third)
        self.assertEqual(len(cache), 1)

    def test_record_facts(self):
        path = write(self.root, 'Vault.sol', '''
        // SPDX-License-Identifier: MIT
        pragma abicoder v2;
        pragma solidity ^0.8.0;
        struct Loose { uint256 a; }
        contract Helper {}
        contract Vault is Helper {
            struct Position { uint256 amount; }
            enum Status { Open }
        }
        ''')
        cache = SourceCache('UNLICENSED', InterfacerDiagnostics())
        record, = self.load(cache, path)
        self.assertEqual(record.license, 'MIT')
        self.assertEqual(record.pragma.value, '^0.8.0')
        self.assertEqual(record.contract_name, 'Vault')
        self.assertEqual(record.interface_name, 'IVault')
        self.assertEqual(record.base_contract_names, ('Helper',))
        self.assertEqual(record.declared_type_names, ('Vault', 'Position', 'Loose', 'Status'))

    def test_fallback_license(self):
        path = write(self.root, 'A.sol', 'pragma solidity ^0.8.0;\ninterface A {}')
        cache = SourceCache('GPL-3.0', InterfacerDiagnostics())
        record, = self.load(cache, path)
        self.assertEqual(record.license, 'GPL-3.0')
        self.assertEqual(record.interface_name, 'A')

    def test_cancelled_load_releases_waiters(self):
        path = write(self.root, 'A.sol', 'pragma solidity ^0.8.0;\ncontract A {}')

        class StalledCache(SourceCache):
            async def _read(self, key, importer):
                await asyncio.Event().wait()

        async def scenario():
            cache = StalledCache('UNLICENSED', InterfacerDiagnostics())
            first = asyncio.ensure_future(cache.load(path))
            await asyncio.sleep(0)
            second = asyncio.ensure_future(cache.load(path))
            await asyncio.sleep(0)
            first.cancel()
            try:
                await asyncio.wait_for(second, timeout=5)
            except asyncio.CancelledError:
                return path in cache
            return None

        self.assertIs(asyncio.run(scenario()), False)


class TestSynthesis(SynthesisTestCase):
    """End-to-end interface generation on a temporary project."""

    def test_vault_interface(self):
        path = write(self.root, 'contracts/Vault.sol', '''
        // SPDX-License-Identifier: MIT
        pragma solidity ^0.8.0;

        contract Vault {
            struct Position {
                uint256 amount;
                address owner;
            }
            struct Unused {
                uint256 x;
            }

            mapping(address => uint256) public balances;

            function open(uint256 amount) external returns (Position memory) {}
            function close(uint256 id) external {}
        }
        ''')
        artifact, = self.synthesizer().run([path])
        expected_path = self.root / 'contracts' / 'interfaces' / 'IVault.sol'
        self.assertEqual(artifact.output_path, expected_path)
        self.assertTrue(artifact.emitted)
        self.assertEqual(expected_path.read_text(), textwrap.dedent('''\
            // SPDX-License-Identifier: MIT
            pragma solidity ^0.8.0;

            interface IVault {
                struct Position {
                    uint256 amount;
                    address owner;
                }

                function balances(address) external view returns (uint256);

                function open(uint256 amount) external returns (Position memory);
                function close(uint256 id) external;
            }
            '''))
        self.assertNotIn('Unused', artifact.rendered_text)

    def test_idempotence(self):
        path = write(self.root, 'A.sol', '''
        pragma solidity ^0.8.0;
        contract A { function a() external {} }
        ''')
        synthesizer = self.synthesizer()
        first, second = synthesizer.run([path, path])
        third, = synthesizer.run([path])
        self.assertIs(first, second)
        self.assertIs(first, third)
        self.assertEqual(synthesizer.written, [self.root / 'interfaces' / 'IA.sol'])

    def test_inheritance_clause_follows_declaration_order(self):
        write(self.root, 'contracts/A.sol', '''
        pragma solidity ^0.8.0;
        contract A { function a() external {} }
        ''')
        write(self.root, 'contracts/B.sol', '''
        pragma solidity ^0.8.0;
        contract B { function b() external {} }
        ''')
        path = write(self.root, 'contracts/C.sol', '''
        pragma solidity ^0.8.0;
        import "./B.sol";
        import "./A.sol";
        contract C is A, B { function c() external {} }
        ''')
        synthesizer = self.synthesizer()
        artifact, = synthesizer.run([path])
        self.assertIn('interface IC is IA, IB {', artifact.rendered_text)
        self.assertIn('import "./IB.sol";\nimport "./IA.sol";', artifact.rendered_text)
        interfaces = self.root / 'contracts' / 'interfaces'
        self.assertEqual(sorted(p.name for p in interfaces.iterdir()), ['IA.sol', 'IB.sol', 'IC.sol'])
        self.assertEqual(len(synthesizer.written), 3)

    def write_cycle(self):
        a = write(self.root, 'contracts/A.sol', '''
        pragma solidity ^0.8.0;
        import "./B.sol";
        contract A { function link(B other) external {} }
        ''')
        b = write(self.root, 'contracts/B.sol', '''
        pragma solidity ^0.8.0;
        import "./A.sol";
        contract B { function back(A other) external {} }
        ''')
        return a, b

    def test_import_cycle_terminates(self):
        a, _ = self.write_cycle()
        synthesizer = self.synthesizer()
        artifact = asyncio.run(asyncio.wait_for(synthesizer.synthesize(a), timeout=10))
        self.assertIn('import "../B.sol";', artifact.rendered_text)
        self.assertIn('function link(B other) external;', artifact.rendered_text)
        ib = (self.root / 'contracts' / 'interfaces' / 'IB.sol').read_text()
        self.assertIn('import "../A.sol";', ib)
        self.assertIn('function back(A other) external;', ib)
        self.assertEqual(len(synthesizer.written), 2)

    def test_import_cycle_between_concurrent_roots(self):
        a, b = self.write_cycle()
        synthesizer = self.synthesizer()
        artifacts = asyncio.run(asyncio.wait_for(synthesizer.synthesize_all([a, b]), timeout=10))
        self.assertTrue(all(artifact.emitted for artifact in artifacts))
        self.assertEqual(len(synthesizer.written), 2)

    def test_raw_types_only(self):
        write(self.root, 'contracts/Token.sol', '''
        pragma solidity ^0.8.0;
        contract Token { function x() external {} }
        ''')
        path = write(self.root, 'contracts/Vault.sol', '''
        pragma solidity ^0.8.0;
        import "./Token.sol";
        contract Vault {
            function deposit(Token token, uint256 amount) external {}
            function total() external view returns (uint256) {}
        }
        ''')
        synthesizer = self.synthesizer(only_raw_types=True)
        artifact, = synthesizer.run([path])
        self.assertNotIn('deposit', artifact.rendered_text)
        self.assertNotIn('import', artifact.rendered_text)
        self.assertIn('function total() external view returns (uint256);', artifact.rendered_text)
        self.assertNotIn('Token', artifact.used_type_names)
        self.assertEqual(synthesizer.written, [artifact.output_path])

        synthesizer = self.synthesizer()
        artifact, = synthesizer.run([path])
        self.assertIn('import "../Token.sol";', artifact.rendered_text)
        self.assertIn('function deposit(Token token, uint256 amount) external;', artifact.rendered_text)
        self.assertEqual(len(synthesizer.written), 2)

    def test_missing_import_degrades(self):
        path = write(self.root, 'C.sol', '''
        pragma solidity ^0.8.0;
        import "./Missing.sol";
        contract C is Missing { function c() external {} }
        ''')
        synthesizer = self.synthesizer()
        artifact, = synthesizer.run([path])
        self.assertIn('interface IC {', artifact.rendered_text)
        self.assertEqual([w.code for w in synthesizer.diagnostics.warnings], ['W001'])

    def test_missing_root(self):
        synthesizer = self.synthesizer()
        self.assertEqual(synthesizer.run([self.root / 'Nope.sol']), [None])

    def test_malformed_dependency_is_fatal(self):
        write(self.root, 'Broken.sol', 'contract Broken {}')
        path = write(self.root, 'C.sol', '''
        pragma solidity ^0.8.0;
        import "./Broken.sol";
        contract C is Broken {}
        ''')
        with self.assertRaises(MalformedSourceError) as raised:
            self.synthesizer().run([path])
        self.assertTrue(raised.exception.path.endswith('Broken.sol'))

    def test_interface_sources_are_reused(self):
        ithing = write(self.root, 'contracts/IThing.sol', '''
        pragma solidity ^0.8.0;
        interface IThing { function f() external; }
        ''')
        path = write(self.root, 'contracts/Widget.sol', '''
        pragma solidity ^0.8.0;
        import "./IThing.sol";
        contract Widget is IThing { function f() external {} }
        ''')
        synthesizer = self.synthesizer()
        reused, artifact = synthesizer.run([ithing, path])
        self.assertEqual(reused.output_path, ithing)
        self.assertFalse(reused.emitted)
        self.assertIn('import "../IThing.sol";', artifact.rendered_text)
        self.assertIn('interface IWidget is IThing {', artifact.rendered_text)
        self.assertEqual(synthesizer.written, [artifact.output_path])

    def test_library_types_imported_from_source(self):
        write(self.root, 'contracts/Lib.sol', '''
        pragma solidity ^0.8.0;
        library Lib { struct Pos { uint256 a; } }
        ''')
        path = write(self.root, 'contracts/Vault.sol', '''
        pragma solidity ^0.8.0;
        import "./Lib.sol";
        contract Vault { function get() external view returns (Lib.Pos memory) {} }
        ''')
        synthesizer = self.synthesizer()
        artifact, = synthesizer.run([path])
        self.assertIn('import "../Lib.sol";', artifact.rendered_text)
        self.assertIn('function get() external view returns (Lib.Pos memory);', artifact.rendered_text)
        self.assertEqual(synthesizer.written, [artifact.output_path])

    def test_module_dependencies_are_segregated(self):
        write(self.root, 'node_modules/@oz/contracts/access/Ownable.sol', '''
        pragma solidity ^0.8.0;
        contract Ownable { function owner() external view returns (address) {} }
        ''')
        path = write(self.root, 'contracts/Vault.sol', '''
        pragma solidity ^0.8.0;
        import "@oz/contracts/access/Ownable.sol";
        contract Vault is Ownable { function v() external {} }
        ''')
        synthesizer = self.synthesizer(modules_root=str(self.root / 'node_modules'))
        artifact, = synthesizer.run([path])
        dependency = (self.root / 'contracts' / 'interfaces' / 'dependencies'
                      / '@oz' / 'contracts' / 'IOwnable.sol')
        self.assertTrue(dependency.is_file())
        self.assertIn('import "./dependencies/@oz/contracts/IOwnable.sol";', artifact.rendered_text)
        self.assertIn('interface IVault is IOwnable {', artifact.rendered_text)

    def test_absolute_target_root_and_license_fallback(self):
        path = write(self.root, 'src/A.sol', '''
        pragma solidity ^0.8.0;
        contract A { function a() external {} }
        ''')
        out = self.root / 'out'
        artifact, = self.synthesizer(target_root=str(out), license='GPL-3.0').run([path])
        self.assertEqual(artifact.output_path, out / 'IA.sol')
        self.assertTrue(artifact.rendered_text.startswith('// SPDX-License-Identifier: GPL-3.0\n'))


    def test_dropped_stub_does_not_keep_struct(self):
        path = write(self.root, 'C.sol', '''
        pragma solidity ^0.8.0;
        contract C {
            struct S { uint256 a; }
            function f(S memory s, function (uint256) external cb) external {}
            function g() external {}
        }
        ''')
        artifact, = self.synthesizer().run([path])
        self.assertNotIn('struct S', artifact.rendered_text)
        self.assertIn('interface IC {\n    function g() external;\n}', artifact.rendered_text)

    def test_dropped_stub_does_not_keep_import(self):
        write(self.root, 'contracts/T.sol', '''
        pragma solidity ^0.8.0;
        contract T { function t() external {} }
        ''')
        path = write(self.root, 'contracts/C.sol', '''
        pragma solidity ^0.8.0;
        import "./T.sol";
        contract C {
            function f(T t, function (uint256) external cb) external {}
            function g() external {}
        }
        ''')
        synthesizer = self.synthesizer()
        artifact, = synthesizer.run([path])
        self.assertNotIn('import', artifact.rendered_text)
        self.assertNotIn('T', artifact.used_type_names)
        self.assertEqual(synthesizer.written, [artifact.output_path])

    def test_struct_with_mapping_member_is_not_redeclared(self):
        path = write(self.root, 'Registry.sol', '''
        pragma solidity ^0.8.0;
        contract Registry {
            struct Account { uint256 id; mapping(address => bool) approved; }
            function account() external view returns (Account memory) {}
            function count() external view returns (uint256) {}
        }
        ''')
        artifact, = self.synthesizer().run([path])
        self.assertNotIn('struct', artifact.rendered_text)
        self.assertNotIn('account()', artifact.rendered_text)
        self.assertIn('function count() external view returns (uint256);', artifact.rendered_text)

    def test_module_import_rewritten_relative_to_output(self):
        write(self.root, 'node_modules/pkg/Token.sol', '''
        pragma solidity ^0.8.0;
        contract Token { function symbol() external view returns (string memory) {} }
        ''')
        path = write(self.root, 'src/C.sol', '''
        pragma solidity ^0.8.0;
        import "pkg/Token.sol";
        contract C { function take(Token token) external {} }
        ''')
        synthesizer = self.synthesizer(modules_root=str(self.root / 'node_modules'))
        artifact, = synthesizer.run([path])
        self.assertIn('import "../../node_modules/pkg/Token.sol";', artifact.rendered_text)
        self.assertIn('function take(Token token) external;', artifact.rendered_text)

class TestConfig(SynthesisTestCase):
    """Test configuration loading."""

    def test_from_json(self):
        path = self.root / 'interfacer.json'
        path.write_text(json.dumps({'modulesRoot': 'lib', 'onlyRawTypes': True, 'colour': 'red'}))
        with redirect_stderr(io.StringIO()) as err:
            config = InterfacerConfig.from_json(path)
        self.assertEqual(config.modules_root, 'lib')
        self.assertTrue(config.only_raw_types)
        self.assertEqual(config.target_root, 'interfaces')
        self.assertIn('colour', err.getvalue())

    def test_invalid_json(self):
        path = self.root / 'interfacer.json'
        path.write_text('{not json')
        with self.assertRaises(ConfigError):
            InterfacerConfig.from_json(path)

    def test_overrides(self):
        config = InterfacerConfig().with_overrides(target_root='out', license=None)
        self.assertEqual(config.target_root, 'out')
        self.assertEqual(config.license, 'UNLICENSED')
        with self.assertRaises(ConfigError):
            InterfacerConfig().with_overrides(colour='red')


class TestDiagnostics(unittest.TestCase):
    """Test the diagnostics/warning system."""

    def test_collect_and_summarise(self):
        diag = InterfacerDiagnostics()
        diag.warn_missing_import('node_modules/x/Y.sol', 'Vault.sol')
        diag.info_interface_written('interfaces/IVault.sol', 'Vault.sol')
        self.assertEqual(diag.count, 2)
        self.assertEqual(len(diag.warnings), 1)
        self.assertEqual(diag.get_summary(), 'Interfacer warnings: 1 import')
        severities = {d.severity for d in diag.diagnostics}
        self.assertEqual(severities, {DiagnosticSeverity.WARNING, DiagnosticSeverity.INFO})
        diag.clear()
        self.assertEqual(diag.get_summary(), 'No interfacer warnings.')

    def test_print_summary(self):
        diag = InterfacerDiagnostics()
        diag.warn_missing_import('Y.sol')
        out = io.StringIO()
        diag.print_summary(file=out)
        self.assertIn('Y.sol not found', out.getvalue())


class TestCli(SynthesisTestCase):
    """Test the command line entry point."""

    def test_generates_from_globs(self):
        write(self.root, 'contracts/A.sol', '''
        pragma solidity ^0.8.0;
        contract A { function a() external {} }
        ''')
        write(self.root, 'contracts/nested/B.sol', '''
        pragma solidity ^0.8.0;
        contract B { function b() external {} }
        ''')
        with redirect_stdout(io.StringIO()):
            code = main(['--quiet', str(self.root / 'contracts' / '**' / '*.sol')])
        self.assertEqual(code, 0)
        self.assertTrue((self.root / 'contracts' / 'interfaces' / 'IA.sol').is_file())
        self.assertTrue((self.root / 'contracts' / 'nested' / 'interfaces' / 'IB.sol').is_file())

    def test_malformed_source_exit_code(self):
        path = write(self.root, 'Broken.sol', 'contract Broken {}')
        with redirect_stderr(io.StringIO()) as err:
            code = main(['--quiet', str(path)])
        self.assertEqual(code, 1)
        self.assertIn('No pragma found', err.getvalue())

    def test_expand_sources_deduplicates(self):
        path = write(self.root, 'A.sol', 'pragma solidity ^0.8.0;\ncontract A {}')
        pattern = str(self.root / '*.sol')
        self.assertEqual(expand_sources([pattern, str(path)]), [str(path)])


if __name__ == '__main__':
    unittest.main()
