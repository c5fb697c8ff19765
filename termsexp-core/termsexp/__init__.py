from termsexp.declarations import (  # noqa: F401
    Axiom,
    Constructor,
    Declaration,
    Definition,
    Inductive,
    Module,
    Opaque,
    QuotInfo,
    QuotKind,
    Recursor,
    Theorem,
)
from termsexp.encode import expr_to_sexp, level_to_sexp, name_to_sexp  # noqa: F401
from termsexp.export import (  # noqa: F401
    ExportEvent,
    ExportOptions,
    ModuleEvent,
    ModuleExporter,
    declaration_to_sexp,
    is_visible,
    module_to_sexp,
)
from termsexp.exprs import (  # noqa: F401
    App,
    BVar,
    Const,
    FVar,
    Lam,
    Let,
    MData,
    MVar,
    NatLit,
    Pi,
    Proj,
    Sort,
    StrLit,
    app_spine,
    mk_app,
)
from termsexp.fingerprint import fingerprint_declaration, fingerprint_declarations, fingerprint_value  # noqa: F401
from termsexp.levels import LevelIMax, LevelMax, LevelMVar, LevelParam, LevelSucc, LevelZero, level_of_nat  # noqa: F401
from termsexp.loader import ModuleFormatError, load_module, load_module_file  # noqa: F401
from termsexp.names import Name, is_internal  # noqa: F401
from termsexp.sexp import Atom, FloatLit, IntLit, StringLit, Tagged, render, tagged  # noqa: F401
from termsexp.sharing import (  # noqa: F401
    SharingMetrics,
    count_subterms,
    declaration_terms,
    measure_declarations,
    measure_sharing,
    shared_subterms,
)
from termsexp.trace import JSONLTracer, dump_events, read_trace  # noqa: F401
