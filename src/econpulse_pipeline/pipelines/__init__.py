"""
econpulse_pipeline.pipelines — End-to-end pipeline orchestrators.

Each pipeline module exports a run() async function that accepts a
Settings object plus run options and returns a RunResult.

    from econpulse_pipeline.pipelines import economic_data

    result = await economic_data.run(settings, countries=["US"])
"""
