from __future__ import annotations

import gradio as gr
from gradio.themes.base import Base

# Import the event handlers that the UI will call
from backend.prep_agent import (
    advance_question,
    back_to_topics,
    get_hint,
    navigate,
    open_category,
    regenerate_challenges,
    regenerate_quiz,
    render_workspace,
    reset_app,
    run_analysis,
    run_code,
    select_challenge,
    show_plan_if_ready,
    submit_answer,
)
from backend.schemas import Language, QuizCategory


# ============================================================
# 🖥️ UI LAYOUT
# ============================================================

class SkillBridge(Base):
    def __init__(self):
        super().__init__(
            primary_hue=gr.themes.colors.indigo,
            secondary_hue=gr.themes.colors.slate,
            neutral_hue=gr.themes.colors.slate,
            font=(
                gr.themes.GoogleFont("Inter"),
                "ui-sans-serif",
                "system-ui",
                "sans-serif",
            ),
        )
        self.set(
            # Colors -- Slate & Indigo Theme
            body_background_fill="#0f172a",
            body_background_fill_dark="#0f172a",
            body_text_color="#e2e8f0",
            body_text_color_dark="#e2e8f0",

            button_primary_background_fill="#4f46e5",
            button_primary_background_fill_dark="#4f46e5",
            button_primary_text_color="#ffffff",

            button_secondary_background_fill="#1e293b",
            button_secondary_background_fill_dark="#1e293b",
            button_secondary_text_color="#e2e8f0",

            # Component Styling
            block_background_fill="#1e293b",
            block_border_width="1px",
            block_border_color="#334155",
            block_title_text_color="#e2e8f0",

            input_background_fill="#334155",
            input_border_color="#475569",
        )
css = """
.container { max-width: 1100px; margin: auto; }
.inline-error { color: #f87171; font-weight: bold; }
.feedback { font-size: 1.05em; }
"""

with gr.Blocks(title="SkillBridge Prep", theme=SkillBridge(), css=css) as demo:

    # UI-local state
    intake_mode = gr.State("text")
    quiz_progress = gr.State(None)

    gr.Markdown("# ✨ SkillBridge Prep: Placement Assistance", elem_classes="text-center")

    # --- VIEW 1: ANALYZER ---
    with gr.Column(visible=True) as intake_col:
        gr.Markdown(
            "### Land your dream job with customized training\n"
            "Paste a job description or upload a screenshot. The AI analyzes the requirements and "
            "builds a study plan, an assessment and coding challenges for your target company."
        )
        company_input = gr.Textbox(label="Target Company", placeholder="e.g. Amazon, TCS, Google")

        with gr.Tabs():
            with gr.Tab("📝 Paste Job Description") as text_tab:
                jd_text = gr.Textbox(label="Job Description", lines=10, placeholder="Paste the job description here.")
            with gr.Tab("🖼️ Upload Screenshot") as image_tab:
                jd_image = gr.Image(label="Job Description Screenshot", type="filepath")

        intake_error = gr.Markdown(elem_classes="inline-error")
        loading_msg = gr.Markdown(visible=False)
        analyze_btn = gr.Button("🔍 Analyze & Generate Plan", variant="primary")
        view_plan_btn = gr.Button("View Generated Plan →", visible=False)

    # --- WORKSPACE ---
    with gr.Column(visible=False) as workspace_col:
        with gr.Row():
            nav_analyzer_btn = gr.Button("🔍 Analyzer", size="sm")
            nav_plan_btn = gr.Button("📚 Study Plan", size="sm")
            nav_quiz_btn = gr.Button("✅ Assessment", size="sm")
            nav_code_btn = gr.Button("💻 Coding Lab", size="sm")
            reset_btn = gr.Button("↩️ Reset App", size="sm", variant="stop")

        # --- VIEW 2: DASHBOARD & STUDY PLAN ---
        with gr.Column(visible=True) as plan_col:
            gr.Markdown("## Study Roadmap\nA tailored weekly schedule to crack the interview.")
            dashboard_html = gr.HTML()
            plan_table = gr.Dataframe(label="Weekly Study Plan", interactive=False, wrap=True)
            plan_resources = gr.Markdown()

        # --- VIEW 3: QUIZ RUNNER ---
        with gr.Column(visible=False) as quiz_col:
            gr.Markdown("## Skill Assessment\nPractice questions adapted to the company's pattern.")

            with gr.Column(visible=True) as quiz_topics_col:
                category_board = gr.Dataframe(label="Topics", interactive=False)
                category_input = gr.Radio(
                    choices=[category.value for category in QuizCategory],
                    label="Select a topic to start practicing",
                )
                with gr.Row():
                    start_topic_btn = gr.Button("▶️ Start", variant="primary")
                    regenerate_quiz_btn = gr.Button("🔄 Regenerate")

            with gr.Column(visible=False) as quiz_question_col:
                q_header = gr.Markdown()
                q_options = gr.Radio(label="Your answer", choices=[])
                q_feedback = gr.Markdown(elem_classes="feedback")
                with gr.Row():
                    next_btn = gr.Button("Next Question ➡️", visible=False)
                    back_to_topics_btn = gr.Button("⬅️ Back to Topics")

        # --- VIEW 4: CODE LAB ---
        with gr.Column(visible=False) as code_col:
            gr.Markdown(
                "## Coding Challenge\nWrite code and run it in a simulated environment. "
                "The AI judge predicts the results; nothing is actually executed."
            )
            with gr.Row():
                challenge_dropdown = gr.Dropdown(label="Challenge", choices=[], scale=3)
                language_dropdown = gr.Dropdown(
                    label="Language",
                    choices=[language.value for language in Language],
                    value=Language.PYTHON.value,
                    scale=1,
                )
                regenerate_challenges_btn = gr.Button("🔄 New Challenges", scale=1)

            with gr.Row():
                with gr.Column(scale=2):
                    challenge_md = gr.Markdown()
                    hint_md = gr.Markdown()
                with gr.Column(scale=3):
                    code_editor = gr.Code(label="Editor", language="python", lines=18)
                    with gr.Row():
                        run_btn = gr.Button("▶️ Run Code", variant="primary")
                        hint_btn = gr.Button("💡 Get Hint")

            run_summary = gr.Markdown()
            test_cases_table = gr.Dataframe(label="Test Cases", interactive=False, wrap=True)


    # --- WIRING ---
    VIEW_OUTPUTS = [intake_col, workspace_col, plan_col, quiz_col, code_col]
    QUESTION_OUTPUTS = [q_header, q_options, q_feedback, next_btn]
    CODE_LAB_OUTPUTS = [challenge_dropdown, challenge_md, code_editor, hint_md, run_summary, test_cases_table]

    text_tab.select(fn=lambda: "text", inputs=None, outputs=intake_mode)
    image_tab.select(fn=lambda: "image", inputs=None, outputs=intake_mode)

    analyze_btn.click(
        fn=run_analysis,
        inputs=[intake_mode, jd_text, jd_image, company_input],
        outputs=[intake_error, loading_msg, analyze_btn, intake_col, workspace_col, view_plan_btn],
    ).then(
        fn=render_workspace,
        inputs=[language_dropdown],
        outputs=[dashboard_html, plan_table, plan_resources, category_board, quiz_topics_col, quiz_question_col, quiz_progress] + CODE_LAB_OUTPUTS,
    ).then(
        fn=show_plan_if_ready,
        inputs=None,
        outputs=VIEW_OUTPUTS,
    )

    view_plan_btn.click(fn=lambda: navigate("plan"), inputs=None, outputs=VIEW_OUTPUTS)
    nav_analyzer_btn.click(fn=lambda: navigate("analyzer"), inputs=None, outputs=VIEW_OUTPUTS)
    nav_plan_btn.click(fn=lambda: navigate("plan"), inputs=None, outputs=VIEW_OUTPUTS)
    nav_quiz_btn.click(fn=lambda: navigate("quiz"), inputs=None, outputs=VIEW_OUTPUTS)
    nav_code_btn.click(fn=lambda: navigate("code"), inputs=None, outputs=VIEW_OUTPUTS)

    reset_btn.click(
        fn=reset_app,
        inputs=None,
        outputs=[intake_col, workspace_col, view_plan_btn, intake_error, company_input, jd_text, jd_image],
    )

    start_topic_btn.click(
        fn=open_category,
        inputs=[category_input],
        outputs=[quiz_progress, quiz_topics_col, quiz_question_col] + QUESTION_OUTPUTS,
    )

    q_options.input(
        fn=submit_answer,
        inputs=[quiz_progress, q_options],
        outputs=[quiz_progress, quiz_topics_col, quiz_question_col] + QUESTION_OUTPUTS,
    )

    next_btn.click(
        fn=advance_question,
        inputs=[quiz_progress],
        outputs=[quiz_progress, quiz_topics_col, quiz_question_col] + QUESTION_OUTPUTS,
    )

    back_to_topics_btn.click(
        fn=back_to_topics,
        inputs=None,
        outputs=[quiz_progress, quiz_topics_col, quiz_question_col],
    )

    regenerate_quiz_btn.click(
        fn=regenerate_quiz,
        inputs=None,
        outputs=[category_board, quiz_progress, quiz_topics_col, quiz_question_col],
    )

    # User edits only: programmatic updates of these dropdowns must not wipe the editor twice.
    challenge_dropdown.input(
        fn=select_challenge,
        inputs=[challenge_dropdown, language_dropdown],
        outputs=CODE_LAB_OUTPUTS[1:],
    )
    language_dropdown.input(
        fn=select_challenge,
        inputs=[challenge_dropdown, language_dropdown],
        outputs=CODE_LAB_OUTPUTS[1:],
    )

    regenerate_challenges_btn.click(
        fn=regenerate_challenges,
        inputs=[language_dropdown],
        outputs=CODE_LAB_OUTPUTS,
    )

    run_btn.click(
        fn=run_code,
        inputs=[challenge_dropdown, language_dropdown, code_editor],
        outputs=[run_summary, test_cases_table],
    )

    hint_btn.click(
        fn=get_hint,
        inputs=[challenge_dropdown, language_dropdown, code_editor],
        outputs=[hint_md],
    )
