from __future__ import annotations

from ..config import EffectiveConfig
from ..domain import Recipe
from ..errors import ScanError
from ..site import Site
from .state import describe_recipe, describe_status
from .textual import App, ComposeResult, Footer, Header, Horizontal, Label, ListItem, ListView, Static, VerticalScroll

APP_CSS = """
#browser {
    height: 1fr;
}

#recipes {
    width: 40%;
    border: round $panel;
}

#detail-pane {
    width: 1fr;
    border: round $panel;
    padding: 0 1;
}

#status {
    height: auto;
    padding: 0 1;
    background: $panel;
}
"""


class RecipeItem(ListItem):
    def __init__(self, recipe: Recipe) -> None:
        super().__init__(Label(recipe.title, markup=False))
        self.recipe = recipe


class RecipeBrowserApp(App):
    TITLE = "recipebox"
    CSS = APP_CSS
    BINDINGS = [("q", "quit", "Quit"), ("r", "rescan", "Rescan")]

    def __init__(self, cfg: EffectiveConfig) -> None:
        super().__init__()
        self.cfg = cfg
        self.site = Site.from_config(cfg)

    def compose(self) -> ComposeResult:
        yield Header(icon=self.cfg.tui.header_icon)
        with Horizontal(id="browser"):
            yield ListView(id="recipes")
            with VerticalScroll(id="detail-pane"):
                yield Static("", id="detail", markup=False)
        yield Static("", id="status", markup=False)
        yield Footer()

    async def on_mount(self) -> None:
        await self.action_rescan()

    async def action_rescan(self) -> None:
        status = self.query_one("#status", Static)
        try:
            await self.site.store.scan()
        except ScanError as exc:
            status.update(str(exc))
        else:
            status.update(describe_status(len(self.site.store.snapshot), self.site.store.failures))

        list_view = self.query_one("#recipes", ListView)
        await list_view.clear()
        await list_view.extend(RecipeItem(recipe) for recipe in self.site.store.list())
        self.query_one("#detail", Static).update("")

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        item = event.item
        if isinstance(item, RecipeItem):
            self.query_one("#detail", Static).update(describe_recipe(item.recipe))
