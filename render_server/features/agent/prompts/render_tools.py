EXECUTE_CODE_TOOL_DESCRIPTION = """
Execute Manim Python code in an isolated Docker container and return the URL of the rendered video.
Pass the complete program as `code`; it is saved as scene.py and the first Scene subclass it declares is rendered.
Declare the scene class you want rendered before any helper classes.
On failure the tool returns the render logs; fix the code and call the tool again.
Args: code.
""".strip()
