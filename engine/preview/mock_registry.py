"""
Preview Kernel — Mock Module Registry

A declarative catalog of behavioural stand-ins for common third-party
packages. For every bundle the registry builds one substitute module per
external package, exporting exactly the symbols the bundle references.

Known symbols get a hand-written JavaScript expression. Any other symbol
goes through the package's fallback factory, and unknown packages use the
structural fallback: capitalized names become no-op components, `use*`
names become hooks returning an inert result, and everything else a
no-op function. No exported value is ever `undefined`.

Extending the catalog means adding a `MockPackage`; nothing else changes.
All expressions run inside the bundle, where `M` is the prelude helper
table (see js/prelude.js) and `React` is the page's runtime.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from engine.preview.imports import is_runtime_specifier
from engine.preview.types import MockModuleEntry

PRELUDE_PATH = Path(__file__).parent / "js" / "prelude.js"

_prelude_cache: dict[str, str] = {}


def load_prelude() -> str:
    """Load and cache the JavaScript helper table shared by all mocks."""
    if "prelude" not in _prelude_cache:
        _prelude_cache["prelude"] = PRELUDE_PATH.read_text()
    return _prelude_cache["prelude"]


@dataclass(frozen=True)
class MockPackage:
    """
    One catalog entry.

    `name` is an exact package name, or a prefix when `prefix` is set.
    `fallback` is a JS factory called with a symbol name for symbols that
    have no hand-written expression.
    """

    name: str
    exports: Mapping[str, str] = field(default_factory=dict)
    default: str | None = None
    fallback: str = "M.structural"
    prefix: bool = False
    preamble: str = ""

    def matches(self, package: str) -> bool:
        if self.prefix:
            return package.startswith(self.name)
        return package == self.name


def _js(value: str) -> str:
    return json.dumps(value)


def _display_name(package: str) -> str:
    base = package.rstrip("/").split("/")[-1] or "Mock"
    parts = re.split(r"[^A-Za-z0-9]+", base)
    name = "".join(p[:1].upper() + p[1:] for p in parts if p)
    return name or "Mock"


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

_ICON_DEFAULT = "M.icon('Icon')"

_CLASS_HELPERS = [
    MockPackage("clsx", exports={"clsx": "M.classNames"}, default="M.classNames"),
    MockPackage("classnames", exports={"classNames": "M.classNames"}, default="M.classNames"),
    MockPackage(
        "tailwind-merge",
        exports={
            "twMerge": "M.classNames",
            "twJoin": "M.classNames",
            "extendTailwindMerge": "function () { return M.classNames; }",
        },
        default="M.classNames",
    ),
    MockPackage("class-variance-authority", exports={"cva": "M.variants", "cx": "M.classNames"}, default="M.variants"),
]

_ICON_SETS = [
    MockPackage("lucide-react", fallback="M.icon", default=_ICON_DEFAULT, prefix=True),
    MockPackage("react-icons/", fallback="M.icon", default=_ICON_DEFAULT, prefix=True),
    MockPackage("@heroicons/react", fallback="M.icon", default=_ICON_DEFAULT, prefix=True),
    MockPackage("@phosphor-icons/react", fallback="M.icon", default=_ICON_DEFAULT, prefix=True),
    MockPackage("phosphor-react", fallback="M.icon", default=_ICON_DEFAULT),
    MockPackage("@tabler/icons-react", fallback="M.icon", default=_ICON_DEFAULT),
    MockPackage("@radix-ui/react-icons", fallback="M.icon", default=_ICON_DEFAULT),
    MockPackage("react-feather", fallback="M.icon", default=_ICON_DEFAULT),
    MockPackage("@mui/icons-material", fallback="M.icon", default=_ICON_DEFAULT, prefix=True),
    MockPackage("iconoir-react", fallback="M.icon", default=_ICON_DEFAULT),
    MockPackage("@iconify/react", exports={"Icon": "M.icon('Icon')"}, fallback="M.icon", default=_ICON_DEFAULT),
]

_MOTION = [
    MockPackage(
        "framer-motion",
        exports={
            "motion": "M.tagFactory(M.motionTag)",
            "m": "M.tagFactory(M.motionTag)",
            "AnimatePresence": "M.passthrough('AnimatePresence')",
            "LayoutGroup": "M.passthrough('LayoutGroup')",
            "LazyMotion": "M.passthrough('LazyMotion')",
            "MotionConfig": "M.passthrough('MotionConfig')",
            "Reorder": "{ Group: M.element('Reorder.Group', 'ul'), Item: M.element('Reorder.Item', 'li') }",
            "domAnimation": "{}",
            "domMax": "{}",
            "useAnimation": "function () { return { start: function () { return Promise.resolve(); }, stop: M.noop, set: M.noop }; }",
            "useAnimationControls": "function () { return { start: function () { return Promise.resolve(); }, stop: M.noop, set: M.noop }; }",
            "useMotionValue": "M.motionValue",
            "useTransform": "function (v, input, output) { return M.motionValue(output ? output[0] : (v && v.get ? v.get() : v)); }",
            "useSpring": "function (v) { return M.motionValue(v && v.get ? v.get() : v); }",
            "useInView": "function () { return true; }",
            "useReducedMotion": "function () { return true; }",
            "useScroll": "function () { return { scrollX: M.motionValue(0), scrollY: M.motionValue(0), scrollXProgress: M.motionValue(0), scrollYProgress: M.motionValue(0) }; }",
            "useMotionTemplate": "function () { return ''; }",
            "useMotionValueEvent": "M.noop",
            "animate": "function () { return { stop: M.noop, then: function (f) { return Promise.resolve().then(f); } }; }",
            "useAnimate": "function () { return [{ current: null }, function () { return Promise.resolve(); }]; }",
        },
    ),
    MockPackage(
        "@react-spring/web",
        exports={
            "animated": "M.tagFactory(function (tag) { return M.element('animated.' + tag, tag); })",
            "a": "M.tagFactory(function (tag) { return M.element('animated.' + tag, tag); })",
            "useSpring": "function () { return {}; }",
            "useSprings": "function (n) { return Array.from({ length: n || 0 }, function () { return {}; }); }",
            "useTrail": "function (n) { return Array.from({ length: n || 0 }, function () { return {}; }); }",
            "useTransition": "function (items) { var list = Array.isArray(items) ? items : [items]; return function (render) { return list.map(function (item, i) { return render({}, item, {}, i); }); }; }",
            "config": "{ default: {}, gentle: {}, wobbly: {}, stiff: {}, slow: {}, molasses: {} }",
        },
    ),
]
_MOTION.append(MockPackage("motion/react", exports=_MOTION[0].exports))
_MOTION.append(MockPackage("react-spring", exports=_MOTION[1].exports))

_ROUTER_HOOKS = {
    "useRouter": "function () { return { push: M.noop, replace: M.noop, back: M.noop, forward: M.noop, refresh: M.noop, prefetch: M.noop, pathname: '/', query: {}, asPath: '/', route: '/', isReady: true, events: { on: M.noop, off: M.noop, emit: M.noop } }; }",
    "usePathname": "function () { return '/'; }",
    "useSearchParams": "function () { return new URLSearchParams(); }",
    "useParams": "function () { return {}; }",
    "useSelectedLayoutSegment": "function () { return null; }",
    "useSelectedLayoutSegments": "function () { return []; }",
    "redirect": "M.noop",
    "permanentRedirect": "M.noop",
    "notFound": "M.noop",
}

_LINK = (
    "M.named(function (props) { props = props || {}; var href = props.href || props.to || '#';"
    " if (typeof href === 'object') href = href.pathname || '#';"
    " var attrs = M.htmlProps(props); attrs.href = href; return M.h('a', attrs, props.children); }, 'Link')"
)

_ROUTING = [
    MockPackage("next/link", default=_LINK),
    MockPackage(
        "next/image",
        default=(
            "M.named(function (props) { props = props || {}; var src = typeof props.src === 'object' && props.src ? props.src.src : props.src;"
            " var style = Object.assign({}, props.fill ? { width: '100%', height: '100%', objectFit: 'cover' } : {}, props.style || {});"
            " return M.h('img', { src: src, alt: props.alt || '', width: props.fill ? undefined : props.width,"
            " height: props.fill ? undefined : props.height, className: props.className, style: style }); }, 'Image')"
        ),
    ),
    MockPackage("next/navigation", exports=_ROUTER_HOOKS),
    MockPackage("next/router", exports=_ROUTER_HOOKS, default="{ push: M.noop, replace: M.noop, back: M.noop, pathname: '/', query: {} }"),
    MockPackage("next/head", default="M.nothing('Head')"),
    MockPackage("next/script", default="M.nothing('Script')"),
    MockPackage("next/dynamic", default="function () { return M.element('Dynamic'); }"),
    MockPackage(
        "next/font/",
        fallback="(function (name) { return function () { return { className: '', variable: '', style: { fontFamily: 'system-ui, -apple-system, sans-serif' } }; }; })",
        default="function () { return { className: '', variable: '', style: { fontFamily: 'system-ui, -apple-system, sans-serif' } }; }",
        prefix=True,
    ),
    MockPackage(
        "react-router-dom",
        exports={
            "Link": _LINK,
            "NavLink": _LINK,
            "useNavigate": "function () { return M.noop; }",
            "useLocation": "function () { return { pathname: '/', search: '', hash: '', state: null, key: 'default' }; }",
            "useParams": "function () { return {}; }",
            "useSearchParams": "function () { return [new URLSearchParams(), M.noop]; }",
            "useMatch": "function () { return null; }",
            "useLoaderData": "function () { return {}; }",
            "Outlet": "M.nothing('Outlet')",
            "Navigate": "M.nothing('Navigate')",
            "Route": "M.nothing('Route')",
            "Routes": "M.passthrough('Routes')",
            "BrowserRouter": "M.passthrough('BrowserRouter')",
            "MemoryRouter": "M.passthrough('MemoryRouter')",
            "HashRouter": "M.passthrough('HashRouter')",
        },
    ),
]
_ROUTING.append(MockPackage("react-router", exports=_ROUTING[-1].exports))

_PRIMITIVES = [
    MockPackage("@radix-ui/react-slot", exports={"Slot": "M.Slot", "Slottable": "M.passthrough('Slottable')", "Root": "M.Slot"}),
    MockPackage("@radix-ui/react-", fallback="M.primitive", default="M.primitiveNamespace('Primitive')", prefix=True),
    MockPackage(
        "radix-ui",
        exports={"Slot": "{ Root: M.Slot, Slot: M.Slot, Slottable: M.passthrough('Slottable') }"},
        fallback="M.primitiveNamespace",
    ),
    MockPackage(
        "@headlessui/react",
        exports={
            "Transition": "M.headless('Transition')",
            "TransitionChild": "M.passthrough('TransitionChild')",
            "Fragment": "React.Fragment",
        },
        fallback="M.headless",
    ),
    MockPackage(
        "vaul",
        exports={"Drawer": "M.primitiveNamespace('Drawer')"},
        fallback="M.primitive",
    ),
    MockPackage(
        "cmdk",
        exports={"Command": "Object.assign(M.element('Command'), { Input: M.element('Command.Input', 'input'), List: M.element('Command.List'), Empty: M.nothing('Command.Empty'), Group: M.element('Command.Group'), Item: M.element('Command.Item'), Separator: M.element('Command.Separator', 'hr') })"},
    ),
]

_FORMS = [
    MockPackage(
        "react-hook-form",
        exports={
            "useForm": "M.formBag",
            "useFormContext": "M.formBag",
            "FormProvider": "M.passthrough('FormProvider')",
            "Controller": "M.named(function (props) { return props && props.render ? props.render({ field: { name: props.name, value: '', onChange: M.noop, onBlur: M.noop, ref: M.noop }, fieldState: { invalid: false }, formState: { errors: {} } }) : null; }, 'Controller')",
            "useController": "function (o) { return { field: { name: o && o.name, value: '', onChange: M.noop, onBlur: M.noop, ref: M.noop }, fieldState: { invalid: false }, formState: { errors: {} } }; }",
            "useFieldArray": "function () { return { fields: [], append: M.noop, prepend: M.noop, remove: M.noop, insert: M.noop, move: M.noop, swap: M.noop, update: M.noop, replace: M.noop }; }",
            "useWatch": "function () { return undefined; }",
            "useFormState": "function () { return { errors: {}, isSubmitting: false, isValid: true, isDirty: false }; }",
        },
    ),
    MockPackage("@hookform/resolvers/", fallback="(function (name) { return function () { return function () { return { values: {}, errors: {} }; }; }; })", prefix=True),
    MockPackage(
        "zod",
        preamble="var z = {}; ['string','number','boolean','object','array','enum','union','literal','date','any','unknown','record','tuple','optional','nullable','nativeEnum','bigint','void','null','undefined','lazy','intersection','discriminatedUnion','instanceof','function','never','map','set','promise','preprocess','custom'].forEach(function (k) { z[k] = M.schema; }); z.coerce = z; z.ZodError = Error;",
        exports={"z": "z", "ZodError": "Error"},
        fallback="(function (name) { return /^[a-z]/.test(name) && name !== 'infer' ? M.schema : M.fn(name); })",
        default="z",
    ),
    MockPackage(
        "formik",
        preamble="var bag = { values: {}, errors: {}, touched: {}, isSubmitting: false, isValid: true, handleChange: M.noop, handleBlur: M.noop, handleSubmit: function (e) { if (e && e.preventDefault) e.preventDefault(); }, setFieldValue: M.noop, resetForm: M.noop, getFieldProps: function (n) { return { name: n, value: '', onChange: M.noop, onBlur: M.noop }; } };",
        exports={
            "Formik": "M.named(function (props) { return M.h(React.Fragment, null, M.renderChildren(props && props.children, bag)); }, 'Formik')",
            "Form": "M.element('Form', 'form')",
            "Field": "M.element('Field', 'input')",
            "ErrorMessage": "M.nothing('ErrorMessage')",
            "FieldArray": "M.named(function (props) { return props && typeof props.render === 'function' ? props.render({ push: M.noop, remove: M.noop, form: bag }) : null; }, 'FieldArray')",
            "useFormik": "function () { return bag; }",
            "useFormikContext": "function () { return bag; }",
            "useField": "function (n) { return [bag.getFieldProps(typeof n === 'string' ? n : n && n.name), { touched: false, error: undefined }, { setValue: M.noop, setTouched: M.noop }]; }",
        },
    ),
]

_STATE = [
    MockPackage("zustand", exports={"create": "M.createStore", "createStore": "M.createStore", "useStore": "function (store, selector) { var s = store && store.getState ? store.getState() : {}; return selector ? selector(s) : s; }"}, default="M.createStore"),
    MockPackage("zustand/", fallback="(function (name) { return /^[a-z]/.test(name) ? function (f) { return f; } : M.structural(name); })", default="M.createStore", prefix=True),
    MockPackage(
        "jotai",
        exports={
            "atom": "function (init) { return { init: typeof init === 'function' ? undefined : init }; }",
            "useAtom": "function (a) { return [a ? a.init : undefined, M.noop]; }",
            "useAtomValue": "function (a) { return a ? a.init : undefined; }",
            "useSetAtom": "function () { return M.noop; }",
            "Provider": "M.passthrough('Provider')",
            "createStore": "function () { return { get: function (a) { return a ? a.init : undefined; }, set: M.noop, sub: function () { return M.noop; } }; }",
        },
    ),
    MockPackage("jotai/", fallback="(function (name) { return /^atomWith/.test(name) ? function (k, init) { return { init: init === undefined ? k : init }; } : M.structural(name); })", prefix=True),
    MockPackage(
        "recoil",
        exports={
            "atom": "function (o) { return { init: o ? o['default'] : undefined }; }",
            "selector": "function () { return { init: undefined }; }",
            "atomFamily": "function (o) { return function () { return { init: o ? o['default'] : undefined }; }; }",
            "selectorFamily": "function () { return function () { return { init: undefined }; }; }",
            "useRecoilState": "function (a) { return [a ? a.init : undefined, M.noop]; }",
            "useRecoilValue": "function (a) { return a ? a.init : undefined; }",
            "useSetRecoilState": "function () { return M.noop; }",
            "useResetRecoilState": "function () { return M.noop; }",
            "RecoilRoot": "M.passthrough('RecoilRoot')",
        },
    ),
    MockPackage(
        "valtio",
        exports={
            "proxy": "function (o) { return o || {}; }",
            "useSnapshot": "function (o) { return o || {}; }",
            "subscribe": "function () { return M.noop; }",
            "snapshot": "function (o) { return o || {}; }",
            "ref": "function (o) { return o; }",
        },
    ),
    MockPackage(
        "react-redux",
        exports={
            "useSelector": "function (selector) { try { return selector({}); } catch (e) { return undefined; } }",
            "useDispatch": "function () { return M.noop; }",
            "useStore": "function () { return { getState: function () { return {}; }, dispatch: M.noop, subscribe: function () { return M.noop; } }; }",
            "Provider": "M.passthrough('Provider')",
            "connect": "function () { return function (C) { return C; }; }",
        },
    ),
]

_QUERY_HOOKS = {
    "useQuery": "M.hook('useQuery')",
    "useSuspenseQuery": "M.hook('useSuspenseQuery')",
    "useInfiniteQuery": "function () { var r = M.inert(); r.data = { pages: [], pageParams: [] }; r.fetchNextPage = M.noop; r.hasNextPage = false; return r; }",
    "useQueries": "function (o) { return ((o && o.queries) || []).map(function () { return M.inert(); }); }",
    "useMutation": "function () { return { mutate: M.noop, mutateAsync: function () { return Promise.resolve(); }, isPending: false, isLoading: false, isError: false, isSuccess: false, reset: M.noop, status: 'idle' }; }",
    "useQueryClient": "function () { return { invalidateQueries: M.noop, setQueryData: M.noop, getQueryData: M.noop, refetchQueries: M.noop, prefetchQuery: M.noop, cancelQueries: M.noop }; }",
    "useIsFetching": "function () { return 0; }",
    "QueryClient": "function QueryClient() { this.invalidateQueries = M.noop; this.setQueryData = M.noop; this.getQueryData = M.noop; }",
    "QueryClientProvider": "M.passthrough('QueryClientProvider')",
    "HydrationBoundary": "M.passthrough('HydrationBoundary')",
    "keepPreviousData": "function (d) { return d; }",
}

_QUERY = [
    MockPackage("@tanstack/react-query", exports=_QUERY_HOOKS),
    MockPackage("react-query", exports=_QUERY_HOOKS),
    MockPackage(
        "swr",
        exports={
            "useSWRConfig": "function () { return { mutate: M.noop, cache: new Map() }; }",
            "mutate": "function () { return Promise.resolve(); }",
            "SWRConfig": "M.passthrough('SWRConfig')",
            "preload": "M.noop",
        },
        default="M.hook('useSWR')",
    ),
    MockPackage("swr/", default="function () { var r = M.inert(); r.size = 1; r.setSize = M.noop; return r; }", prefix=True),
    MockPackage(
        "@apollo/client",
        exports={
            "useQuery": "M.hook('useQuery')",
            "useLazyQuery": "function () { return [M.noop, M.inert()]; }",
            "useMutation": "function () { return [function () { return Promise.resolve({}); }, { loading: false, error: undefined, data: undefined }]; }",
            "useSubscription": "M.hook('useSubscription')",
            "gql": "function () { return {}; }",
            "ApolloProvider": "M.passthrough('ApolloProvider')",
            "ApolloClient": "function ApolloClient() {}",
            "InMemoryCache": "function InMemoryCache() {}",
        },
    ),
    MockPackage(
        "@tanstack/react-table",
        exports={
            "useReactTable": "function (o) { o = o || {}; var rows = (o.data || []).map(function (d, i) { return { id: String(i), original: d, getVisibleCells: function () { return []; }, getIsSelected: function () { return false; } }; }); return { getHeaderGroups: function () { return []; }, getRowModel: function () { return { rows: rows }; }, getAllColumns: function () { return []; }, getState: function () { return { pagination: { pageIndex: 0, pageSize: 10 } }; }, getCanNextPage: function () { return false; }, getCanPreviousPage: function () { return false; }, nextPage: M.noop, previousPage: M.noop, getPageCount: function () { return 1; }, setPageIndex: M.noop }; }",
            "flexRender": "function (c, ctx) { return typeof c === 'function' ? c(ctx) : c; }",
            "createColumnHelper": "function () { return { accessor: function (k, o) { return Object.assign({ accessorKey: k }, o); }, display: function (o) { return o; }, group: function (o) { return o; } }; }",
        },
        fallback="(function (name) { return /^get.*RowModel$/.test(name) ? function () { return M.noop; } : M.structural(name); })",
    ),
    MockPackage(
        "axios",
        preamble="var client = {}; ['get','post','put','patch','delete','request','head'].forEach(function (k) { client[k] = function () { return Promise.resolve({ data: {}, status: 200 }); }; }); client.create = function () { return client; }; client.interceptors = { request: { use: M.noop }, response: { use: M.noop } }; client.defaults = { headers: {} }; client.isAxiosError = function () { return false; };",
        exports={"isAxiosError": "client.isAxiosError"},
        default="client",
    ),
]

_AUTH = [
    MockPackage(
        "next-auth/react",
        exports={
            "useSession": "function () { return { data: { user: M.sampleUser(), expires: '2099-01-01' }, status: 'authenticated', update: M.noop }; }",
            "signIn": "function () { return Promise.resolve(); }",
            "signOut": "function () { return Promise.resolve(); }",
            "getSession": "function () { return Promise.resolve({ user: M.sampleUser() }); }",
            "SessionProvider": "M.passthrough('SessionProvider')",
        },
    ),
    MockPackage(
        "@clerk/",
        exports={
            "useUser": "function () { return { isLoaded: true, isSignedIn: true, user: M.sampleUser() }; }",
            "useAuth": "function () { return { isLoaded: true, isSignedIn: true, userId: 'user_1', sessionId: 'sess_1', getToken: function () { return Promise.resolve(''); }, signOut: M.noop }; }",
            "useClerk": "function () { return { signOut: M.noop, openSignIn: M.noop, openUserProfile: M.noop, user: M.sampleUser() }; }",
            "useOrganization": "function () { return { isLoaded: true, organization: { id: 'org_1', name: 'Acme' } }; }",
            "SignedIn": "M.passthrough('SignedIn')",
            "SignedOut": "M.nothing('SignedOut')",
            "ClerkProvider": "M.passthrough('ClerkProvider')",
            "ClerkLoaded": "M.passthrough('ClerkLoaded')",
            "ClerkLoading": "M.nothing('ClerkLoading')",
            "UserButton": "M.element('UserButton', 'button')",
            "SignInButton": "M.slot('SignInButton', 'button')",
            "SignUpButton": "M.slot('SignUpButton', 'button')",
            "SignOutButton": "M.slot('SignOutButton', 'button')",
        },
        prefix=True,
    ),
]

_FEEDBACK = [
    MockPackage("sonner", exports={"toast": "M.toast()", "Toaster": "M.nothing('Toaster')"}),
    MockPackage(
        "react-hot-toast",
        exports={"toast": "M.toast()", "Toaster": "M.nothing('Toaster')", "useToaster": "function () { return { toasts: [], handlers: {} }; }"},
        default="M.toast()",
    ),
    MockPackage(
        "react-toastify",
        exports={"toast": "M.toast()", "ToastContainer": "M.nothing('ToastContainer')"},
    ),
]

_I18N = [
    MockPackage(
        "react-i18next",
        exports={
            "useTranslation": "function () { return { t: M.translate, i18n: { language: 'en', changeLanguage: function () { return Promise.resolve(); } }, ready: true }; }",
            "Trans": "M.named(function (props) { props = props || {}; return M.h(React.Fragment, null, props.children || props.defaults || M.translate(props.i18nKey || '')); }, 'Trans')",
            "initReactI18next": "{ type: '3rdParty', init: M.noop }",
            "I18nextProvider": "M.passthrough('I18nextProvider')",
            "withTranslation": "function () { return function (C) { return C; }; }",
        },
    ),
    MockPackage(
        "next-intl",
        exports={
            "useTranslations": "function () { var t = function (k) { return M.translate(k); }; t.rich = t; t.raw = t; return t; }",
            "useLocale": "function () { return 'en'; }",
            "useFormatter": "function () { return { number: String, dateTime: M.formatDate, relativeTime: function () { return '3 days ago'; } }; }",
            "useNow": "function () { return new Date(); }",
            "NextIntlClientProvider": "M.passthrough('NextIntlClientProvider')",
        },
    ),
    MockPackage(
        "react-intl",
        exports={
            "FormattedMessage": "M.named(function (props) { props = props || {}; return M.h(React.Fragment, null, props.defaultMessage || M.translate(props.id || '')); }, 'FormattedMessage')",
            "FormattedNumber": "M.named(function (props) { return M.h(React.Fragment, null, String(props && props.value)); }, 'FormattedNumber')",
            "FormattedDate": "M.named(function (props) { return M.h(React.Fragment, null, M.formatDate(props && props.value)); }, 'FormattedDate')",
            "useIntl": "function () { return { formatMessage: function (d) { return (d && (d.defaultMessage || M.translate(d.id || ''))) || ''; }, formatNumber: String, formatDate: M.formatDate, locale: 'en' }; }",
            "IntlProvider": "M.passthrough('IntlProvider')",
        },
    ),
]

_THEMING = [
    MockPackage(
        "next-themes",
        exports={
            "useTheme": "function () { return { theme: 'light', setTheme: M.noop, resolvedTheme: 'light', systemTheme: 'light', themes: ['light', 'dark'] }; }",
            "ThemeProvider": "M.passthrough('ThemeProvider')",
        },
    ),
    MockPackage(
        "styled-components",
        preamble="var styled = M.tagFactory(function (tag) { return function () { return M.element('styled.' + tag, tag); }; }); styled = Object.assign(function (C) { return function () { return C; }; }, styled);",
        exports={
            "css": "function () { return ''; }",
            "keyframes": "function () { return ''; }",
            "createGlobalStyle": "function () { return M.nothing('GlobalStyle'); }",
            "ThemeProvider": "M.passthrough('ThemeProvider')",
            "useTheme": "function () { return {}; }",
        },
        default="styled",
    ),
]
_THEMING.append(MockPackage("@emotion/styled", preamble=_THEMING[-1].preamble, default="styled"))

_DATA_VIZ = [
    MockPackage("recharts", fallback="M.chartPart"),
    MockPackage("@nivo/", fallback="M.chartPart", prefix=True),
    MockPackage("react-chartjs-2", fallback="(function (name) { return M.chartPart(name + 'Chart'); })"),
    MockPackage("chart.js", exports={"Chart": "Object.assign(function Chart() {}, { register: M.noop })"}, fallback="(function () { return {}; })"),
]

_DATES = [
    MockPackage("date-fns", exports={"format": "function (d) { return M.formatDate(d); }"}, fallback="M.dateFn", prefix=True),
    MockPackage("dayjs", default="Object.assign(function (v) { return M.chainableDate(v); }, { extend: M.noop, locale: M.noop, tz: function (v) { return M.chainableDate(v); } })", prefix=True),
    MockPackage("moment", default="Object.assign(function (v) { return M.chainableDate(v); }, { locale: M.noop, duration: function () { return { humanize: function () { return 'a few days'; } }; } })", prefix=True),
]

_INTERACTION = [
    MockPackage(
        "@dnd-kit/",
        exports={
            "DndContext": "M.passthrough('DndContext')",
            "SortableContext": "M.passthrough('SortableContext')",
            "DragOverlay": "M.nothing('DragOverlay')",
            "useSortable": "function () { return { attributes: {}, listeners: {}, setNodeRef: M.noop, setActivatorNodeRef: M.noop, transform: null, transition: null, isDragging: false }; }",
            "useDraggable": "function () { return { attributes: {}, listeners: {}, setNodeRef: M.noop, transform: null, isDragging: false }; }",
            "useDroppable": "function () { return { setNodeRef: M.noop, isOver: false }; }",
            "useSensor": "function () { return {}; }",
            "useSensors": "function () { return []; }",
            "arrayMove": "function (a) { return a; }",
            "CSS": "{ Transform: { toString: function () { return ''; } }, Translate: { toString: function () { return ''; } }, Transition: { toString: function () { return ''; } } }",
        },
        fallback="(function (name) { return /^[A-Z]/.test(name) ? M.structural(name) : function () { return null; }; })",
        prefix=True,
    ),
    MockPackage("embla-carousel-react", default="function () { return [M.noop, undefined]; }"),
    MockPackage("embla-carousel-autoplay", default="function () { return {}; }"),
    MockPackage(
        "swiper/react",
        exports={
            "Swiper": "M.named(function (props) { return M.h('div', { 'data-mock': 'Swiper', style: { display: 'flex', gap: 16, overflow: 'hidden' } }, props && props.children); }, 'Swiper')",
            "SwiperSlide": "M.named(function (props) { return M.h('div', { 'data-mock': 'SwiperSlide', style: { flex: '0 0 auto' } }, M.renderChildren(props && props.children, { isActive: true })); }, 'SwiperSlide')",
            "useSwiper": "function () { return { slideNext: M.noop, slidePrev: M.noop }; }",
        },
    ),
    MockPackage("swiper", fallback="(function () { return {}; })", prefix=True),
]

_CONTENT = [
    MockPackage("react-markdown", default="M.named(function (props) { return M.h('div', { 'data-mock': 'Markdown' }, props && props.children); }, 'Markdown')"),
    MockPackage("remark-", default="function () { return M.noop; }", prefix=True),
    MockPackage("rehype-", default="function () { return M.noop; }", prefix=True),
    MockPackage(
        "react-syntax-highlighter",
        exports={
            "Prism": "M.named(function (props) { return M.h('pre', { 'data-mock': 'SyntaxHighlighter' }, M.h('code', null, props && props.children)); }, 'Prism')",
            "Light": "M.named(function (props) { return M.h('pre', { 'data-mock': 'SyntaxHighlighter' }, M.h('code', null, props && props.children)); }, 'Light')",
        },
        default="M.named(function (props) { return M.h('pre', { 'data-mock': 'SyntaxHighlighter' }, M.h('code', null, props && props.children)); }, 'SyntaxHighlighter')",
    ),
    MockPackage("react-syntax-highlighter/", fallback="(function () { return {}; })", default="{}", prefix=True),
    MockPackage("react-player", default="M.named(function (props) { return M.h('div', { 'data-mock': 'ReactPlayer', style: { width: (props && props.width) || '100%', aspectRatio: '16 / 9', background: '#0a0a0a', borderRadius: 8 } }); }, 'ReactPlayer')", prefix=True),
    MockPackage(
        "react-pdf",
        exports={
            "Document": "M.element('Document')",
            "Page": "M.named(function () { return M.h('div', { 'data-mock': 'PdfPage', style: { width: '100%', aspectRatio: '8.5 / 11', background: '#ffffff', border: '1px solid #e5e5e5' } }); }, 'Page')",
            "pdfjs": "{ GlobalWorkerOptions: {} }",
        },
    ),
]

_MEDIA_3D = [
    MockPackage(
        "@react-three/fiber",
        exports={
            "Canvas": "M.named(function (props) { return M.h('div', { 'data-mock': 'Canvas', style: { width: '100%', height: 320, background: '#0a0a0a' } }); }, 'Canvas')",
            "useFrame": "M.noop",
            "useThree": "function () { return { camera: {}, gl: {}, scene: {}, size: { width: 320, height: 320 }, viewport: { width: 1, height: 1 } }; }",
            "useLoader": "function () { return {}; }",
            "extend": "M.noop",
        },
    ),
    MockPackage("@react-three/", fallback="(function (name) { return /^[A-Z]/.test(name) ? M.nothing(name) : M.structural(name); })", prefix=True),
    MockPackage("three", fallback="(function (name) { return /^[A-Z]/.test(name) ? function () {} : M.fn(name); })", prefix=True),
    MockPackage(
        "remotion",
        exports={
            "AbsoluteFill": "M.named(function (props) { props = props || {}; return M.h('div', { 'data-mock': 'AbsoluteFill', style: Object.assign({ position: 'absolute', inset: 0, display: 'flex', flexDirection: 'column' }, props.style || {}) }, props.children); }, 'AbsoluteFill')",
            "Sequence": "M.passthrough('Sequence')",
            "Series": "Object.assign(M.passthrough('Series'), { Sequence: M.passthrough('Series.Sequence') })",
            "useCurrentFrame": "function () { return 0; }",
            "useVideoConfig": "function () { return { fps: 30, width: 1920, height: 1080, durationInFrames: 150 }; }",
            "interpolate": "function (v, input, output) { return output ? output[output.length - 1] : v; }",
            "spring": "function () { return 1; }",
            "Img": "M.element('Img', 'img')",
            "staticFile": "function (p) { return p; }",
            "Easing": "{ bezier: function () { return function (t) { return t; }; }, linear: function (t) { return t; }, ease: function (t) { return t; } }",
        },
    ),
]

DEFAULT_PACKAGES: tuple[MockPackage, ...] = tuple(
    _CLASS_HELPERS
    + _ICON_SETS
    + _MOTION
    + _ROUTING
    + _PRIMITIVES
    + _FORMS
    + _STATE
    + _QUERY
    + _AUTH
    + _FEEDBACK
    + _I18N
    + _THEMING
    + _DATA_VIZ
    + _DATES
    + _INTERACTION
    + _CONTENT
    + _MEDIA_3D
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class MockRegistry:
    """Catalog lookup plus per-bundle module synthesis."""

    def __init__(self, packages: Iterable[MockPackage] = DEFAULT_PACKAGES) -> None:
        self._exact: dict[str, MockPackage] = {}
        self._prefixed: list[MockPackage] = []
        for package in packages:
            self.register(package)

    def register(self, package: MockPackage) -> None:
        """Add or replace a catalog entry."""
        if package.prefix:
            self._prefixed = [p for p in self._prefixed if p.name != package.name]
            self._prefixed.append(package)
            self._prefixed.sort(key=lambda p: len(p.name), reverse=True)
        else:
            self._exact[package.name] = package

    def lookup(self, package: str) -> MockPackage | None:
        """Exact entry first, then the longest matching prefix entry."""
        if package in self._exact:
            return self._exact[package]
        for candidate in self._prefixed:
            if candidate.matches(package):
                return candidate
        return None

    def is_known(self, package: str) -> bool:
        return self.lookup(package) is not None

    def build_module(self, entry: MockModuleEntry) -> str:
        """
        Build the CommonJS body of a substitute module.

        Raises ValueError for the rendering runtime, which is never mocked.
        """
        if is_runtime_specifier(entry.package):
            raise ValueError(f"Refusing to mock the rendering runtime: {entry.package}")

        package = self.lookup(entry.package)
        fallback = package.fallback if package else "M.structural"
        exports = package.exports if package else {}

        lines = ["var M = __mock;"]
        if package and package.preamble:
            lines.append(package.preamble)
        lines.append("var out = { __esModule: true };")
        for symbol in entry.named_symbols:
            expr = exports.get(symbol) or f"{fallback}({_js(symbol)})"
            lines.append(f"out[{_js(symbol)}] = {expr};")

        if "default" in entry.symbols or "*" in entry.symbols:
            if package and package.default:
                default_expr = package.default
            elif exports.get("default"):
                default_expr = exports["default"]
            else:
                default_expr = f"{fallback}({_js(_display_name(entry.package))})"
            lines.append(f"out['default'] = {default_expr};")

        lines.append("module.exports = out;")
        return "\n".join(lines)

    def build_modules(self, entries: Mapping[str, MockModuleEntry]) -> dict[str, str]:
        return {name: self.build_module(entry) for name, entry in sorted(entries.items())}


default_registry = MockRegistry()
