"""Built-in boilerplate generators and the default template registry.

Each ``generate_<name>`` coroutine writes one template into a target root and
returns a :class:`~boilergen.scaffolder.registry.GenerationResult`. Two
strategies exist:

* **map mode** templates render a ``{output_path: template_path}`` layout
  through :class:`TemplateRenderer` and write it with
  :func:`write_file_map`. Output paths are computed here from the entity
  name so file names and identifiers always agree.
* **copy mode** templates copy a static tree from ``scaffolder/static/``
  into a fixed subdirectory of the target.

:func:`build_default_registry` wires every generator into a
:class:`TemplateRegistry`, including the ``react-native`` composite.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from ..utils import print_info
from .dependencies import merge_dependencies
from .materializer import DEFAULT_IGNORE, copy_tree, walk_files, write_file_map
from .placeholders import interpolate
from .registry import (
    GenerateFn,
    GenerationResult,
    TemplateDescriptor,
    TemplateError,
    TemplateRegistry,
)
from .templates import TemplateRenderer


_DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


# ---------------------------------------------------------------------------
# Dependencies per template
# ---------------------------------------------------------------------------

REDUX_DEPENDENCIES = ("@reduxjs/toolkit", "react-redux")
API_DEPENDENCIES = ("axios",)
AUTH_DEPENDENCIES = ("axios", "js-cookie")
FORM_DEPENDENCIES: tuple[str, ...] = ()
CRUD_DEPENDENCIES = ("axios",)
COMPONENT_DEPENDENCIES = ("@testing-library/react", "@testing-library/jest-dom")
CONTEXT_DEPENDENCIES: tuple[str, ...] = ()
MIDDLEWARE_DEPENDENCIES = ("jsonwebtoken",)
EXPRESS_DEPENDENCIES = ("express", "dotenv", "morgan", "mongoose", "jsonwebtoken")
RN_NAVIGATION_DEPENDENCIES = (
    "@react-navigation/native",
    "@react-navigation/stack",
    "@react-navigation/bottom-tabs",
    "@react-navigation/drawer",
    "react-native-gesture-handler",
    "react-native-safe-area-context",
    "react-native-screens",
)
RN_ASSETS_DEPENDENCIES: tuple[str, ...] = ()
RN_SERVICES_DEPENDENCIES = ("axios", "react-native-config", "react-native-keychain")
RN_REDUX_DEPENDENCIES = (
    "react-redux",
    "@reduxjs/toolkit",
    "redux-persist",
    "@react-native-async-storage/async-storage",
)

REACT_NATIVE_PARTS = (
    "react-native-redux",
    "react-native-services",
    "react-native-navigation",
    "react-native-assets",
)


def _entity(options: Sequence[str], default: str) -> str:
    """First extra positional, or *default* when absent or blank."""
    if options and options[0].strip():
        return options[0].strip()
    return default


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


class BoilerplateGenerator:
    """Produces every built-in template.

    Args:
        renderer: Jinja2 renderer for map-mode templates. A default one
            loading the bundled ``templates/`` directory is created if
            omitted.
        static_dir: Root of the copy-mode static trees. Defaults to the
            bundled ``static/`` directory.
    """

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        static_dir: str | Path | None = None,
    ) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.static_dir = Path(static_dir) if static_dir is not None else _DEFAULT_STATIC_DIR

    # -- Map-mode templates ------------------------------------------------

    async def generate_redux(self, root: Path, options: Sequence[str]) -> GenerationResult:
        names = interpolate(_entity(options, "counter"))
        layout = {
            f"store/slices/{names.name}Slice.js": "redux/slice.js.j2",
            f"store/actions/{names.name}Actions.js": "redux/actions.js.j2",
            f"store/selectors/{names.name}Selectors.js": "redux/selectors.js.j2",
            "store/index.js": "redux/store_index.js.j2",
        }
        instructions = [
            f"Import the {names.name}Slice in your store configuration",
            "Wrap your app with the Redux Provider",
            "Add your API calls in the action creators",
            "Create your own hooks and components using the generated structure",
        ]
        return await self._generate_mapped(
            root, layout, {"entity": names.as_context()}, REDUX_DEPENDENCIES, instructions
        )

    async def generate_api(self, root: Path, options: Sequence[str]) -> GenerationResult:
        names = interpolate(_entity(options, "user"))
        layout = {
            f"api/{names.name}Api.js": "api/service.js.j2",
            "api/client.js": "api/client.js.j2",
            "api/endpoints.js": "api/endpoints.js.j2",
            f"hooks/use{names.capitalized}Api.js": "api/hook.js.j2",
            "utils/apiUtils.js": "api/api_utils.js.j2",
        }
        instructions = [
            "Configure your API base URL in api/client.js",
            "Update the endpoints in api/endpoints.js",
            f"Use the use{names.capitalized}Api hook in your components or modify it",
        ]
        return await self._generate_mapped(
            root, layout, {"entity": names.as_context()}, API_DEPENDENCIES, instructions
        )

    async def generate_auth(self, root: Path, options: Sequence[str]) -> GenerationResult:
        layout = {
            "auth/AuthContext.js": "auth/context.js.j2",
            "auth/AuthProvider.jsx": "auth/provider.jsx.j2",
            "auth/authService.js": "auth/service.js.j2",
            "hooks/useAuth.js": "auth/hook.js.j2",
            "components/Auth/LoginForm.jsx": "auth/login_form.jsx.j2",
            "components/Auth/LoginForm.module.css": "auth/login_form.module.css.j2",
            "components/Auth/ProtectedRoute.jsx": "auth/protected_route.jsx.j2",
            "utils/tokenUtils.js": "auth/token_utils.js.j2",
            "constants/authConstants.js": "auth/constants.js.j2",
        }
        instructions = [
            "Wrap your app with AuthProvider",
            "Configure your auth endpoints in constants/authConstants.js",
            "Use ProtectedRoute for protected pages (requires react-router-dom)",
            "Use the useAuth hook to access auth state and methods",
        ]
        return await self._generate_mapped(root, layout, {}, AUTH_DEPENDENCIES, instructions)

    async def generate_form(self, root: Path, options: Sequence[str]) -> GenerationResult:
        names = interpolate(_entity(options, "contact"))
        form_dir = "components/Forms"
        layout = {
            f"{form_dir}/{names.capitalized}Form.jsx": "form/form.jsx.j2",
            f"{form_dir}/{names.capitalized}Form.module.css": "form/form.module.css.j2",
            f"{form_dir}/FormField.jsx": "form/field.jsx.j2",
            f"{form_dir}/FormField.module.css": "form/field.module.css.j2",
            f"{form_dir}/FormButton.jsx": "form/button.jsx.j2",
            f"{form_dir}/FormButton.module.css": "form/button.module.css.j2",
            "hooks/useForm.js": "form/use_form.js.j2",
            "utils/formValidation.js": "form/validation.js.j2",
            "constants/formConstants.js": "form/constants.js.j2",
        }
        instructions = [
            f"Use the {names.capitalized}Form component in your pages",
            "Customize validation rules in utils/formValidation.js",
            "Modify form fields based on your requirements",
            "Use FormField for consistent form styling",
        ]
        return await self._generate_mapped(
            root, layout, {"entity": names.as_context()}, FORM_DEPENDENCIES, instructions
        )

    async def generate_crud(self, root: Path, options: Sequence[str]) -> GenerationResult:
        names = interpolate(_entity(options, "user"))
        component_dir = f"components/{names.capitalized}"
        layout = {
            f"{component_dir}/{names.capitalized}List.jsx": "crud/list.jsx.j2",
            f"{component_dir}/{names.capitalized}Form.jsx": "crud/form.jsx.j2",
            f"{component_dir}/{names.capitalized}Item.jsx": "crud/item.jsx.j2",
            f"hooks/use{names.capitalized}CRUD.js": "crud/hook.js.j2",
            f"services/{names.name}Service.js": "crud/service.js.j2",
            f"types/{names.name}Types.js": "crud/types.js.j2",
        }
        instructions = [
            f"Import and use {names.capitalized}List in your main component",
            f"Configure API endpoints in services/{names.name}Service.js",
            "Customize the entity structure in the types file",
            f"Use the use{names.capitalized}CRUD hook for CRUD operations",
        ]
        return await self._generate_mapped(
            root, layout, {"entity": names.as_context()}, CRUD_DEPENDENCIES, instructions
        )

    async def generate_components(self, root: Path, options: Sequence[str]) -> GenerationResult:
        names = interpolate(_entity(options, "Button"))
        component_dir = f"components/{names.capitalized}"
        layout = {
            f"{component_dir}/{names.capitalized}.jsx": "components/component.jsx.j2",
            f"{component_dir}/{names.capitalized}.module.css": "components/component.module.css.j2",
            f"{component_dir}/{names.capitalized}.test.js": "components/component.test.js.j2",
            f"{component_dir}/{names.capitalized}.stories.js": "components/component.stories.js.j2",
            f"{component_dir}/index.js": "components/index.js.j2",
        }
        instructions = [
            f"Import {names.capitalized} from 'components/{names.capitalized}'",
            "Customize component props and styling",
            "Run tests with npm test",
            "View stories with Storybook (if configured)",
        ]
        return await self._generate_mapped(
            root, layout, {"entity": names.as_context()}, COMPONENT_DEPENDENCIES, instructions
        )

    async def generate_context(self, root: Path, options: Sequence[str]) -> GenerationResult:
        names = interpolate(_entity(options, "theme"))
        layout = {
            f"context/{names.capitalized}Context.js": "context/context.js.j2",
            f"context/{names.capitalized}Provider.jsx": "context/provider.jsx.j2",
            f"hooks/use{names.capitalized}.js": "context/hook.js.j2",
            f"constants/{names.name}Constants.js": "context/constants.js.j2",
        }
        instructions = [
            f"Wrap your app with {names.capitalized}Provider",
            f"Use the use{names.capitalized} hook to access context values",
            "Customize context values and actions based on your needs",
        ]
        return await self._generate_mapped(
            root, layout, {"entity": names.as_context()}, CONTEXT_DEPENDENCIES, instructions
        )

    # -- Copy-mode templates -----------------------------------------------

    async def generate_middleware(self, root: Path, options: Sequence[str]) -> GenerationResult:
        instructions = [
            "Create a .env file with JWT_SECRET=your-secret-key",
            'Apply the middleware: app.use("/api", authMiddleware)',
            "Access user data in routes via req.user",
            "Update the publicPaths array for routes that don't need auth",
        ]
        return await self._generate_copied(
            root, "middleware", "middleware", MIDDLEWARE_DEPENDENCIES, instructions
        )

    async def generate_express(self, root: Path, options: Sequence[str]) -> GenerationResult:
        instructions = [
            "Copy express/config/example.env to .env and adjust the values",
            "Start the server: node express/server.js",
            "Edit routes and controllers in express/routes/ and express/controllers/",
        ]
        return await self._generate_copied(
            root, "express", "express", EXPRESS_DEPENDENCIES, instructions
        )

    async def generate_react_native_navigation(
        self, root: Path, options: Sequence[str]
    ) -> GenerationResult:
        instructions = [
            'In App.js, use: import { AppNavigator } from "./navigation";',
            "Add your screens and register them in the navigators",
        ]
        return await self._generate_copied(
            root, "navigation", "navigation", RN_NAVIGATION_DEPENDENCIES, instructions
        )

    async def generate_react_native_assets(
        self, root: Path, options: Sequence[str]
    ) -> GenerationResult:
        return await self._generate_copied(root, "assets", "assets", RN_ASSETS_DEPENDENCIES, [])

    async def generate_react_native_services(
        self, root: Path, options: Sequence[str]
    ) -> GenerationResult:
        instructions = [
            "Create a .env file in the root of your React Native app with API_URL=https://myapi.com",
            "Android only: add to android/app/build.gradle:",
            "apply from: project(':react-native-config').projectDir.getPath() + \"/dotenv.gradle\"",
        ]
        return await self._generate_copied(
            root, "services", "services", RN_SERVICES_DEPENDENCIES, instructions
        )

    async def generate_react_native_redux(
        self, root: Path, options: Sequence[str]
    ) -> GenerationResult:
        instructions = [
            "For a plain Redux store import redux/store.js",
            "For a persisted Redux store import redux/persist/store.js",
        ]
        return await self._generate_copied(
            root, "redux", "redux", RN_REDUX_DEPENDENCIES, instructions
        )

    # -- Internal helpers --------------------------------------------------

    async def _generate_mapped(
        self,
        root: Path,
        layout: Mapping[str, str],
        context: Mapping[str, Any],
        dependencies: Iterable[str],
        instructions: list[str],
    ) -> GenerationResult:
        files = self.renderer.render_map(layout, context)
        report = await write_file_map(root, files)
        return GenerationResult(
            files=list(files),
            dependencies=list(dependencies),
            instructions=instructions,
            skipped=report.skipped,
            failed=report.failed,
        )

    async def _generate_copied(
        self,
        root: Path,
        static_name: str,
        into: str,
        dependencies: Iterable[str],
        instructions: list[str],
    ) -> GenerationResult:
        source = self.static_dir / static_name
        report = await copy_tree(source, root, into=into)
        files = [f"{into}/{rel}" for rel in walk_files(source, ignore=DEFAULT_IGNORE)]
        return GenerationResult(
            files=files,
            dependencies=list(dependencies),
            instructions=instructions,
            skipped=report.skipped,
            failed=report.failed,
        )


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def combine_results(results: Iterable[GenerationResult]) -> GenerationResult:
    """Fold several results into one, de-duplicating dependencies."""
    results = list(results)
    return GenerationResult(
        files=[f for r in results for f in r.files],
        dependencies=merge_dependencies(*(r.dependencies for r in results)),
        instructions=[i for r in results for i in r.instructions],
        skipped=[s for r in results for s in r.skipped],
        failed=[f for r in results for f in r.failed],
    )


def composite_generator(registry: TemplateRegistry, parts: Sequence[str]) -> GenerateFn:
    """Build a generator that runs each registered part in order."""

    async def generate(root: Path, options: Sequence[str]) -> GenerationResult:
        results = []
        for name in parts:
            descriptor = registry.resolve(name)
            if descriptor is None:
                raise TemplateError(f"Composite part '{name}' is not registered")
            print_info(f"Adding {name} boilerplate...")
            results.append(await descriptor.generate(root, options))
        return combine_results(results)

    return generate


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def build_default_registry(generator: BoilerplateGenerator | None = None) -> TemplateRegistry:
    """Return a registry holding every built-in template."""
    gen = generator or BoilerplateGenerator()
    registry = TemplateRegistry()

    entries = [
        ("redux", "Redux store setup with slices, actions, selectors",
         gen.generate_redux, REDUX_DEPENDENCIES, "counter"),
        ("api", "API service layer with client, endpoints and hooks",
         gen.generate_api, API_DEPENDENCIES, "user"),
        ("auth", "Authentication system with context and protected routes",
         gen.generate_auth, AUTH_DEPENDENCIES, None),
        ("form", "Form components with validation",
         gen.generate_form, FORM_DEPENDENCIES, "contact"),
        ("crud", "CRUD list, form, item, hook and service for an entity",
         gen.generate_crud, CRUD_DEPENDENCIES, "user"),
        ("components", "Reusable component with styles, test and story",
         gen.generate_components, COMPONENT_DEPENDENCIES, "Button"),
        ("context", "React Context with provider, hook and constants",
         gen.generate_context, CONTEXT_DEPENDENCIES, "theme"),
        ("middleware", "Express JWT authentication middleware",
         gen.generate_middleware, MIDDLEWARE_DEPENDENCIES, None),
        ("express", "Express server with routes, controllers and MongoDB",
         gen.generate_express, EXPRESS_DEPENDENCIES, None),
        ("react-native-navigation", "React Navigation stack, tab, drawer and auth navigators",
         gen.generate_react_native_navigation, RN_NAVIGATION_DEPENDENCIES, None),
        ("react-native-assets", "React Native assets folder structure",
         gen.generate_react_native_assets, RN_ASSETS_DEPENDENCIES, None),
        ("react-native-services", "React Native axios client and keychain storage",
         gen.generate_react_native_services, RN_SERVICES_DEPENDENCIES, None),
        ("react-native-redux", "React Native Redux store with redux-persist",
         gen.generate_react_native_redux, RN_REDUX_DEPENDENCIES, None),
    ]
    for name, description, generate, dependencies, default_entity in entries:
        registry.register(
            TemplateDescriptor(
                name=name,
                description=description,
                generate=generate,
                dependencies=tuple(dependencies),
                default_entity=default_entity,
            )
        )

    part_descriptors = [registry.resolve(part) for part in REACT_NATIVE_PARTS]
    registry.register(
        TemplateDescriptor(
            name="react-native",
            description="Complete React Native setup (Redux + Services + Navigation + Assets)",
            generate=composite_generator(registry, REACT_NATIVE_PARTS),
            dependencies=tuple(
                merge_dependencies(*(d.dependencies for d in part_descriptors if d is not None))
            ),
            parts=REACT_NATIVE_PARTS,
        )
    )
    return registry
