"""Run the chart-preview command line tool with `python -m chart_preview`."""

from chart_preview.tool.chart_preview import main

if __name__ == "__main__":
    main()
