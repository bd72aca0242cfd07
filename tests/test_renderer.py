"""
Tests renderer HTML — dispatch, isolation des erreurs, profondeur, visibilité,
animations, sections, étape de formulaire, page complète.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from leadpages.blocks import BlockMetadata, BlockRegistry, block_registry
from leadpages.core.schemas import BlockConfig, FormFlow, FormStep, PageDocument, PageSection
from leadpages.flow import FlowState, FormFlowEngine
from leadpages.renderer import (
    HtmlRenderer, Renderer, RenderMode, render_block, render_form_step, render_landing_page,
    render_section, section_styles,
)

LIVE, EDITING = RenderMode.LIVE, RenderMode.EDITING


def _nested(depth: int) -> BlockConfig:
    root = BlockConfig(id="c-1", type="container")
    node = root
    for i in range(2, depth + 1):
        child = BlockConfig(id=f"c-{i}", type="container")
        node.children = [child]
        node = child
    node.children = [BlockConfig(id="leaf", type="headline", props={"text": "Deep"})]
    return root


def _flow() -> FormFlow:
    return FormFlow(
        steps=[
            FormStep(id="a", title="Where?", blocks=[
                BlockConfig(id="addr", type="address-finder", props={"fieldName": "addr", "required": True}),
            ]),
            FormStep(id="b", title="Who?", description="Pick one", blocks=[
                BlockConfig(id="rel", type="radio-cards", props={
                    "fieldName": "rel", "autoAdvance": True,
                    "options": [{"value": "owner", "label": "Owner"}, {"value": "buyer", "label": "Buyer"}],
                }),
            ]),
            FormStep(id="c", title="Contact", layout="two-column", blocks=[
                BlockConfig(id="email", type="email-input", props={"fieldName": "email"}),
                BlockConfig(id="consent", type="checkbox", props={"fieldName": "consent"}),
            ]),
        ],
        submit_button_text="Send it",
        success_title="Done!",
        success_message="We got it.",
    )


# ── Bloc ───────────────────────────────────────────────────────────────────

class TestRenderBlock:
    def test_known_block_wrapped(self):
        html = render_block(BlockConfig(id="h1", type="headline", props={"text": "Hello"}))
        assert 'class="block block--headline"' in html
        assert 'data-block-id="h1"' in html
        assert "<h1" in html and "Hello" in html

    def test_defaults_fill_missing_props(self):
        html = render_block(BlockConfig(id="h1", type="headline"))
        assert "Your Headline Here" in html

    def test_text_is_escaped(self):
        html = render_block(BlockConfig(id="h1", type="headline", props={"text": "<script>x</script>"}))
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_unknown_type_live_renders_nothing(self):
        assert render_block(BlockConfig(id="x", type="mystery"), LIVE) == ""

    def test_unknown_type_editing_placeholder(self):
        html = render_block(BlockConfig(id="x", type="mystery"), EDITING)
        assert "Unknown block type: mystery" in html

    def test_failing_renderer_isolated(self):
        reg = BlockRegistry()

        def boom(ctx):
            raise RuntimeError("broken")

        reg.register("boom", boom, BlockMetadata(name="Boom", category="content"))
        reg.register("ok", lambda ctx: "<p>fine</p>", BlockMetadata(name="Ok", category="content"))
        section = PageSection(id="s", blocks=[
            BlockConfig(id="b1", type="boom"), BlockConfig(id="b2", type="ok"),
        ])
        live = render_section(section, LIVE, registry=reg)
        assert "fine" in live and "b1" not in live
        editing = render_section(section, EDITING, registry=reg)
        assert "Block failed to render: boom" in editing and "fine" in editing

    def test_invalid_props_isolated(self):
        html = render_block(BlockConfig(id="t", type="testimonial-card", props={"rating": 42}), EDITING)
        assert "block-placeholder" in html

    def test_visibility_classes(self):
        config = BlockConfig(id="h", type="headline", visibility={"mobile": False, "tablet": False})
        html = render_block(config)
        assert "block--hide-mobile" in html and "block--hide-tablet" in html
        assert "block--hide-desktop" not in html

    def test_animation_live_only(self):
        config = BlockConfig(id="h", type="headline", animation={"entrance": "slideUp", "delay": 0.2})
        live = render_block(config, LIVE)
        assert "block--animate-slideUp" in live
        assert "animation-duration:0.4s;animation-delay:0.2s" in live
        assert "block--animate" not in render_block(config, EDITING)
        assert "block--animate" not in render_block(config, LIVE, disable_animations=True)

    def test_editing_marks_block(self):
        assert "block--editing" in render_block(BlockConfig(id="h", type="headline"), EDITING)

    def test_callbacks_bound_in_editing_only(self):
        seen = {}
        reg = BlockRegistry()

        def probe(ctx):
            seen["update"] = ctx.on_update
            seen["select"] = ctx.on_select
            return "<p>probe</p>"

        reg.register("probe", probe, BlockMetadata(name="Probe", category="content"))
        calls = []
        on_update = lambda block_id, props: calls.append(("update", block_id, props))
        on_select = lambda block_id: calls.append(("select", block_id))

        render_block(BlockConfig(id="p1", type="probe"), LIVE, registry=reg, on_update=on_update, on_select=on_select)
        assert seen == {"update": None, "select": None}

        render_block(BlockConfig(id="p1", type="probe"), EDITING, registry=reg, on_update=on_update, on_select=on_select)
        seen["update"]({"text": "x"})
        seen["select"]()
        assert calls == [("update", "p1", {"text": "x"}), ("select", "p1")]

    def test_empty_hero_image_live_skipped(self):
        assert render_block(BlockConfig(id="hi", type="hero-image"), LIVE) == ""
        assert "No image selected" in render_block(BlockConfig(id="hi", type="hero-image"), EDITING)


class TestNesting:
    def test_children_rendered(self):
        card = BlockConfig(id="card", type="card", children=[
            BlockConfig(id="inner", type="headline", props={"text": "Inside"}),
        ])
        html = render_block(card)
        assert "card-block" in html and "Inside" in html

    def test_columns_one_child_per_column(self):
        cols = BlockConfig(id="cols", type="columns", props={"columns": ["1/3", "2/3"]}, children=[
            BlockConfig(id="l", type="headline", props={"text": "Left"}),
            BlockConfig(id="r", type="headline", props={"text": "Right"}),
        ])
        html = render_block(cols)
        assert 'data-width="1/3"' in html and 'data-width="2/3"' in html
        assert html.index("Left") < html.index("Right")

    def test_empty_container_placeholder_in_editing(self):
        assert "Drop blocks here" in render_block(BlockConfig(id="c", type="container"), EDITING)

    def test_max_depth_renders(self):
        html = render_block(_nested(4), LIVE, max_depth=5)
        assert "Deep" in html

    def test_over_depth_is_cut_not_crashing(self):
        html = render_block(_nested(5), LIVE, max_depth=5)
        assert "Deep" not in html
        assert 'data-block-id="c-5"' in html

    def test_over_depth_flagged_in_editing(self):
        html = render_block(_nested(5), EDITING, max_depth=5)
        assert "Maximum nesting depth (5) exceeded" in html

    def test_pathological_depth_default_guard(self):
        html = render_block(_nested(500), LIVE)
        assert "Deep" not in html


# ── Section ────────────────────────────────────────────────────────────────

class TestSection:
    def test_color_background_and_padding(self):
        s = PageSection(id="s", background={"type": "color", "value": "#fff"}, padding={"top": "1rem", "bottom": "3rem"})
        assert section_styles(s) == {"background-color": "#fff", "padding-top": "1rem", "padding-bottom": "3rem"}

    def test_gradient_background(self):
        s = PageSection(id="s", background={"type": "gradient", "value": "linear-gradient(red, blue)"})
        assert section_styles(s)["background"] == "linear-gradient(red, blue)"

    def test_default_padding(self):
        styles = section_styles(PageSection(id="s"))
        assert styles == {"padding-top": "2rem", "padding-bottom": "2rem"}

    def test_image_background_overlay(self):
        s = PageSection(id="s", background={"type": "image", "value": "https://img.example/a.jpg"})
        html = render_section(s)
        assert "page-section__overlay" in html
        assert "url(https://img.example/a.jpg)" in html

    def test_blocks_in_order(self):
        s = PageSection(id="s", blocks=[
            BlockConfig(id="a", type="headline", props={"text": "First"}),
            BlockConfig(id="b", type="subheadline", props={"text": "Second"}),
        ])
        html = render_section(s)
        assert html.index("First") < html.index("Second")


# ── Formulaire ─────────────────────────────────────────────────────────────

class TestFormStep:
    def test_first_step(self):
        html = render_form_step(FormFlowEngine(_flow()))
        assert "Where?" in html
        assert 'value="next"' in html and ">Continue<" in html
        assert 'value="back"' not in html
        assert "form-flow__progress" not in html
        assert 'name="__step" value="1"' in html

    def test_middle_step_progress_and_back(self):
        engine = FormFlowEngine(_flow())
        engine.go_to_step(2)
        html = render_form_step(engine)
        assert "Pick one" in html
        assert 'value="back"' in html
        assert "2 / 3" in html
        assert 'data-auto-advance="true"' in html

    def test_last_step_submit_label_and_layout(self):
        engine = FormFlowEngine(_flow())
        engine.go_to_step(3)
        html = render_form_step(engine)
        assert ">Send it<" in html
        assert "form-flow__fields--two-column" in html

    def test_field_errors_shown(self):
        engine = FormFlowEngine(_flow())
        engine.next_step()
        html = render_form_step(engine)
        assert "field--invalid" in html
        assert "Please select an address from the suggestions" in html

    def test_values_of_other_steps_carried(self):
        engine = FormFlowEngine(_flow(), initial_values={"addr": "1 Queen St", "consent": True})
        engine.go_to_step(2)
        html = render_form_step(engine)
        assert 'type="hidden" name="addr" value="1 Queen St"' in html
        assert 'name="consent" value="true"' in html

    def test_selected_card(self):
        engine = FormFlowEngine(_flow(), initial_values={"rel": "buyer"})
        engine.go_to_step(2)
        html = render_form_step(engine)
        assert "radio-card--selected" in html

    def test_submit_error_banner(self):
        engine = FormFlowEngine(_flow())
        engine.go_to_step(3)
        engine.state = FlowState.SUBMIT_ERROR
        engine.submit_error = "Server unavailable"
        assert "Server unavailable" in render_form_step(engine)

    def test_success_screen(self):
        engine = FormFlowEngine(_flow())
        engine.state = FlowState.SUBMITTED
        html = render_form_step(engine)
        assert "Done!" in html and "We got it." in html
        assert "<form" not in html

    def test_editing_controls_disabled(self):
        html = render_form_step(FormFlowEngine(_flow()), EDITING)
        assert "disabled" in html


# ── Page ───────────────────────────────────────────────────────────────────

class TestLandingPage:
    def test_form_replaces_form_section(self):
        doc = PageDocument(
            sections=[
                PageSection(id="hero", blocks=[BlockConfig(id="h", type="headline", props={"text": "Top"})]),
                PageSection(id="form", name="Form"),
                PageSection(id="footer", blocks=[BlockConfig(id="f", type="body-text", props={"content": "Bottom"})]),
            ],
            form_flow=_flow(),
        )
        html = render_landing_page("Title", doc, FormFlowEngine(doc.form_flow), meta_description="Desc")
        assert html.index("Top") < html.index("Where?") < html.index("Bottom")
        assert '<meta name="description" content="Desc">' in html
        assert "<title>Title</title>" in html

    def test_form_appended_without_form_section(self):
        doc = PageDocument(
            sections=[PageSection(id="hero", blocks=[BlockConfig(id="h", type="headline", props={"text": "Top"})])],
            form_flow=_flow(),
        )
        html = render_landing_page("T", doc, FormFlowEngine(doc.form_flow))
        assert html.index("Top") < html.index("Where?")

    def test_without_engine_renders_sections_only(self):
        doc = PageDocument(sections=[PageSection(id="hero", blocks=[BlockConfig(id="h", type="headline")])])
        html = render_landing_page("T", doc)
        assert "<form" not in html and "Your Headline Here" in html


class TestHtmlRenderer:
    def test_implements_protocol(self):
        renderer = HtmlRenderer(block_registry)
        assert isinstance(renderer, Renderer)
        assert "Hi" in renderer.render_block(BlockConfig(id="h", type="headline", props={"text": "Hi"}))

    def test_bound_options(self):
        renderer = HtmlRenderer(max_depth=1)
        html = renderer.render_section(PageSection(id="s", blocks=[_nested(1)]))
        assert "Deep" not in html
